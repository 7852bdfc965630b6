#!/usr/bin/env python3
"""Seed a registry snapshot with synthetic missing-pet reports.

Reports are generated around a centre point, geocoded through an
in-memory geocoder and submitted through the registry service, so every
seeded record passes the same validation and indexing as a real one.
A share of the reports is moved to ``found`` or ``reunited``.
"""

import argparse
import logging
import random
import sys
import time
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from pet_registry.config import RegistryConfig, StoreConfig
from pet_registry.generators import PetReportGenerator, register_reports
from pet_registry.geocoding import StaticGeocoder
from pet_registry.logging import setup_logging
from pet_registry.models import GeoPoint, PetStatus
from pet_registry.service import build_service

logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed a pet registry snapshot with synthetic reports"
    )
    parser.add_argument(
        "--reports",
        type=int,
        default=200,
        help="Number of reports to generate (default: 200)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for reproducibility (default: 42)",
    )
    parser.add_argument(
        "--lat",
        type=float,
        default=37.4220,
        help="Latitude of the centre point (default: 37.4220)",
    )
    parser.add_argument(
        "--lng",
        type=float,
        default=-122.0841,
        help="Longitude of the centre point (default: -122.0841)",
    )
    parser.add_argument(
        "--spread-km",
        type=float,
        default=25.0,
        help="Maximum distance of reports from the centre (default: 25)",
    )
    parser.add_argument(
        "--city",
        type=str,
        default="Mountain View",
        help="City name for generated addresses",
    )
    parser.add_argument(
        "--resolved-rate",
        type=float,
        default=0.2,
        help="Share of reports moved past 'missing' (default: 0.2)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("output/registry.json"),
        help="Snapshot file to write (default: output/registry.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Log level (default: INFO)",
    )
    args = parser.parse_args()

    setup_logging(args.log_level)

    generator = PetReportGenerator(
        center=GeoPoint(longitude=args.lng, latitude=args.lat),
        spread_km=args.spread_km,
        city=args.city,
        seed=args.seed,
    )
    reports = list(generator.generate_batch(args.reports))

    geocoder = StaticGeocoder()
    register_reports(geocoder, reports)

    config = RegistryConfig(store=StoreConfig(snapshot_path=args.output, pretty_json=True))
    config.geocoder.provider = "static"
    service = build_service(config, geocoder=geocoder)

    start = time.perf_counter()
    with service.store:
        for i, report in enumerate(reports):
            owner = f"seed-user-{i % 25:03d}"
            record = service.report(owner, report.pet_data, report.raw_address)

            if random.random() < args.resolved_rate:
                target = random.choice([PetStatus.FOUND, PetStatus.REUNITED])
                service.update_status(owner, record.pet_id, target)

        summary = service.store.summary()

    elapsed = time.perf_counter() - start
    logger.info("=" * 60)
    logger.info("Seeded %d reports in %.2fs", summary["total"], elapsed)
    for status in PetStatus:
        logger.info("  %-9s %d", status.value, summary[status.value])
    logger.info("Snapshot written to %s", args.output)


if __name__ == "__main__":
    main()
