import argparse
import concurrent.futures
import dataclasses
import logging
import time
from typing import List, Optional

from molsolvent.calculations import CALCULATIONS, create
from molsolvent.core.errors import MolsolventError
from molsolvent.utils.config_manager import ConfigManager, StepEntry

logger = logging.getLogger(__name__)


def _supports_threads(entry: StepEntry) -> bool:
    cls = CALCULATIONS.get(entry.type)
    return cls is not None and any(f.name == 'threads' for f in dataclasses.fields(cls.params_class))


def run_entry(entry: StepEntry, where: str) -> bool:
    """Run one calculation; failures are logged and reported as False."""
    t0 = time.perf_counter()
    try:
        calc = create(entry.type, entry.params)
        logger.info(f"{where}: starting {entry.label}")
        calc.start()
    except (MolsolventError, OSError) as e:
        logger.error(f"{where}: {entry.label} failed: {e}")
        return False
    except Exception as e:
        logger.error(f"{where}: {entry.label} failed with an unexpected error: {e}", exc_info=True)
        return False
    logger.info(f"{where}: {entry.label} done in {time.perf_counter() - t0:.2f} s")
    return True


def run_steps(steps: List[List[StepEntry]]) -> int:
    """
    Run the steps in order; the calculations of one step run concurrently.

    Returns:
        Number of failed calculations
    """
    failures = 0
    for i, step in enumerate(steps):
        if not step:
            continue
        logger.info(f"Step {i}: {len(step)} calculation(s)")
        with concurrent.futures.ThreadPoolExecutor(max_workers=len(step), thread_name_prefix=f"step{i}") as executor:
            futures = [executor.submit(run_entry, entry, f"step {i}, calculation {j}")
                       for j, entry in enumerate(step)]
            failures += sum(not future.result() for future in futures)
    return failures


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Trajectory analysis of solutes in solvents.')
    parser.add_argument('run_file', type=str, help='Path to the YAML run file.')
    parser.add_argument('--threads', type=int, help='Worker threads for g(r) and volume (overrides run file).')
    parser.add_argument('--verbose', action='store_true', help='Log debug messages.')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    if args.threads is not None and args.threads < 1:
        logger.error("--threads must be at least 1.")
        raise SystemExit(1)

    try:
        steps = ConfigManager(args.run_file).get_steps()
    except FileNotFoundError as e:
        logger.error(f"File Error: {e}")
        raise SystemExit(1)
    except MolsolventError as e:
        logger.error(f"Configuration Error: {e}")
        raise SystemExit(1)

    if args.threads is not None:
        for step in steps:
            for entry in step:
                if _supports_threads(entry):
                    entry.params['threads'] = args.threads

    failures = run_steps(steps)
    if failures:
        logger.error(f"{failures} calculation(s) failed.")
        raise SystemExit(1)
    logger.info("All calculations completed.")
    return 0


if __name__ == "__main__":
    main()
