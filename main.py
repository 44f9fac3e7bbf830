"""
Assess landslide risk for a single point from the command line.

    python main.py --lat 27.7172 --lon 85.3240 --depth 2.5
    python main.py --lat 46.55 --lon 7.98 --rain 180 --json
"""

import argparse
import json
import logging
import sys

from core import EngineConfig, FeatureValidationError, LandslideEngine, ScoringMode
from loaders import SoilGridsLoader, SoilRasterProvider, UnifiedDataFetcher

log = logging.getLogger("main")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Landslide Risk Engine")
    parser.add_argument("--lat", type=float, required=True, help="Latitude")
    parser.add_argument("--lon", type=float, required=True, help="Longitude")
    parser.add_argument("--depth", type=float, default=None, help="Failure plane depth (m)")
    parser.add_argument("--rain", type=float, default=None,
                        help="Simulated rainfall (mm), replaces observed rainfall")
    parser.add_argument("--mode", choices=[m.value for m in ScoringMode], default=None,
                        help="Scoring mode (default from LANDSLIDE_SCORING_MODE)")
    parser.add_argument("--soil-rasters", default=None, metavar="DIR",
                        help="Directory of soil-class GeoTIFFs used when SoilGrids is unreachable")
    parser.add_argument("--json", action="store_true", help="Print the full derivation as JSON")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s │ %(name)-20s │ %(levelname)-8s │ %(message)s',
        datefmt='%H:%M:%S',
    )

    config = EngineConfig.from_env()
    if args.mode:
        config.scoring_mode = ScoringMode(args.mode)
    depth = args.depth if args.depth is not None else config.default_failure_depth_m

    log.info(f"Analysis: {args.lat}, {args.lon} | Rain override: "
             f"{args.rain if args.rain is not None else 'live'}")

    soil = None
    if args.soil_rasters:
        raster = SoilRasterProvider()
        raster.load_directory(args.soil_rasters)
        soil = SoilGridsLoader(raster=raster)

    fetcher = UnifiedDataFetcher(soil=soil)
    try:
        location = fetcher.fetch(args.lat, args.lon, failure_depth_m=depth, manual_rain_mm=args.rain)
    except FeatureValidationError as e:
        log.error(f"Invalid input: {e}")
        return 2

    for error in location.fetch_errors:
        log.warning(error)

    assessment = LandslideEngine(config).assess(location.features)
    verdict = assessment.verdict

    if args.json:
        payload = assessment.to_dict()
        payload["sources"] = location.to_dict()
        print(json.dumps(payload, indent=2, default=str))
        return 0

    print(f"\n=== LANDSLIDE RISK @ {args.lat:.4f}, {args.lon:.4f} ===")
    if assessment.is_simulated:
        print("(simulated rainfall)")
    print(f"Level:        {verdict.level.label}")
    print(f"Probability:  {verdict.probability:.2f}")
    print(f"FoS:          {verdict.factor_of_safety:.2f}")
    print(f"Environment:  {verdict.environment.value}")
    print(f"Soil:         {verdict.soil_type}")
    print(f"\n{verdict.reason}\n")
    for line in assessment.reasoning_trace:
        print(f"  - {line}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
