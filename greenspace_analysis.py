#!/usr/bin/env python
"""
Greenspace Coverage Analysis
============================
Splits greenspace sites along administrative boundaries, summarises greenspace
area per region (optionally per 1000 residents), and measures how far point
reports fall from the area covered by buffered station locations.
"""

import argparse
import time
from pathlib import Path
from typing import Dict, Optional

# Import logging first
from utils.logger import setup_logging, get_logger

from config.config_loader import OUTPUT_DIR, load_config, load_analysis_settings
from core.analysis import run_analysis


def write_outputs(results: Dict, output_dir: Path) -> None:
    """Write the summary tables of a run as CSV files."""
    logger = get_logger(__name__)
    output_dir.mkdir(parents=True, exist_ok=True)

    greenspace = results.get('greenspace')
    if greenspace is not None:
        greenspace.table.to_csv(output_dir / 'greenspace_by_region.csv', index=False)
        if greenspace.mismatch:
            greenspace.mismatch.rows.to_csv(output_dir / 'unmatched_population_keys.csv')
            logger.warning(f"⚠ Unmatched population keys: {greenspace.mismatch.unmatched_keys}")

    coverage = results.get('coverage')
    if coverage is not None:
        table = coverage.points.drop(columns=coverage.points.geometry.name)
        table.to_csv(output_dir / 'report_coverage.csv', index=False)

    logger.info(f"  ✓ Summary tables written to {output_dir}")


def main(config_path: Optional[str] = None, output_dir: Optional[str] = None) -> Optional[Dict]:
    """
    Main execution workflow.

    Workflow Steps:
    1. Setup logging to console and file
    2. Load configuration and settings
    3. Run greenspace-by-region and station coverage analyses
    4. Write summary tables

    Returns:
    --------
    Optional[Dict]
        Analysis results if successful, None if failed
    """
    workflow_start_time = time.time()

    log_file = setup_logging()
    logger = get_logger(__name__)

    logger.info("=" * 80)
    logger.info("GREENSPACE COVERAGE ANALYSIS")
    logger.info("=" * 80)
    logger.info(f"Log file: {log_file}")
    logger.info("")

    try:
        config = load_config(config_path)
        settings = load_analysis_settings(config)
        logger.info(f"Configuration loaded: {len(config['inputs'])} input(s) defined")
        logger.info(f"Working CRS: EPSG:{settings['working_crs']}")
        logger.info("")

        results = run_analysis(config, settings)

        if not results:
            logger.warning("⚠ WARNING: No analysis ran; check the 'inputs' section of the configuration.")

        write_outputs(results, Path(output_dir) if output_dir else OUTPUT_DIR)

        total_execution_time = time.time() - workflow_start_time
        logger.info("")
        logger.info("✓ ANALYSIS COMPLETE")
        logger.info(f"✓ Total execution time: {total_execution_time:.2f} seconds")
        logger.info(f"✓ Log file: {log_file}")

        return results

    except Exception as e:
        elapsed_time = time.time() - workflow_start_time

        logger.error("")
        logger.error("=" * 80)
        logger.error("✗ ANALYSIS FAILED")
        logger.error("=" * 80)
        logger.error(f"Error: {str(e)}", exc_info=True)
        logger.error(f"Analysis failed after {elapsed_time:.2f} seconds")
        logger.error(f"See log file for details: {log_file}")
        logger.error("=" * 80)
        return None


def cli() -> None:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(description="Greenspace coverage analysis")
    parser.add_argument('--config', help="Path to analysis_config.json")
    parser.add_argument('--output-dir', help="Directory for summary CSV files")
    args = parser.parse_args()

    results = main(args.config, args.output_dir)

    if results is None:
        print("\n✗ Analysis failed. Check log file for details.")
        raise SystemExit(1)


if __name__ == "__main__":
    cli()
