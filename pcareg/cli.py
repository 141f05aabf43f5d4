"""
pcareg CLI entry point

Echo the PCAMetric3 settings a parameter file resolves to at each
resolution level.

Usage:
    pcareg-levels params.yaml
    pcareg-levels params.yaml --levels 3 --transform stack-bspline --sub-transforms 10
    pcareg-levels --preset pca_metric3_groupwise --transform bspline --grid-size 6 6 6
"""

import argparse
import sys
from typing import List, Optional

from .config import Configuration, load_configuration
from .registration import (
    AffineTransform,
    BSplineTransform,
    CombinationTransform,
    MetricParameters,
    PCAMetric3,
    ReducedDimensionBSplineTransform,
    RegistrationState,
    StackTransform,
)
from .utils.formatting import to_string, to_vector_of_strings
from .utils.logging_config import get_logger, setup_logging

logger = get_logger("cli")

TRANSFORM_CHOICES = ["plain", "bspline", "stack", "stack-bspline"]
DEFAULT_GRID_POINTS = 8


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog="pcareg-levels",
        description="Print the PCAMetric3 settings resolved at each resolution level",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Levels and dimension taken from the parameter file
  pcareg-levels params.yaml

  # Stack of 10 reduced-dimension B-splines
  pcareg-levels params.yaml --transform stack-bspline --sub-transforms 10
        """,
    )

    parser.add_argument(
        "parameter_file",
        nargs="?",
        help="Path to a YAML parameter file",
    )
    parser.add_argument(
        "--preset", "-p",
        type=str,
        help="Config preset layered under the parameter file",
    )
    parser.add_argument(
        "--label", "-l",
        type=str,
        default="Metric0",
        help="Component label of the metric (default: Metric0)",
    )
    parser.add_argument(
        "--levels", "-n",
        type=int,
        help="Number of resolution levels (default: NumberOfResolutions)",
    )
    parser.add_argument(
        "--dimension", "-d",
        type=int,
        help="Image dimension (default: MovingImageDimension)",
    )

    # Active transform
    parser.add_argument(
        "--transform", "-t",
        type=str,
        default="plain",
        choices=TRANSFORM_CHOICES,
        help="Shape of the active transform (default: plain)",
    )
    parser.add_argument(
        "--grid-size",
        type=int,
        nargs="+",
        help=f"B-spline grid size per axis (default: {DEFAULT_GRID_POINTS} on every axis)",
    )
    parser.add_argument(
        "--sub-transforms",
        type=int,
        default=1,
        help="Number of sub-transforms of a stack (default: 1)",
    )

    # Verbosity
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Also write the log to this file",
    )

    return parser.parse_args(argv)


def build_transform(kind: str, dimension: int, grid_size: Optional[List[int]] = None, sub_transforms: int = 1):
    """Build a transform descriptor of the requested shape"""
    if kind == "plain":
        return AffineTransform(dimension)
    if kind == "bspline":
        size = tuple(grid_size) if grid_size else (DEFAULT_GRID_POINTS,) * dimension
        if len(size) != dimension:
            raise ValueError(f"--grid-size needs {dimension} values, got {len(size)}")
        return CombinationTransform(BSplineTransform(size))
    if kind == "stack":
        return CombinationTransform(StackTransform([AffineTransform(dimension - 1)] * sub_transforms))
    if kind == "stack-bspline":
        size = tuple(grid_size) if grid_size else (DEFAULT_GRID_POINTS,) * (dimension - 1)
        return CombinationTransform(
            StackTransform([ReducedDimensionBSplineTransform(size) for _ in range(sub_transforms)])
        )
    raise ValueError(f"Unknown transform kind: {kind}. Must be one of {TRANSFORM_CHOICES}")


def format_parameters(level: int, params: MetricParameters) -> str:
    """One line per level: Key=value pairs"""
    def vector(values):
        return " ".join(to_vector_of_strings(values)) if values is not None else "(none)"

    fields = [
        f"SubtractMean={to_string(params.subtract_mean)}",
        f"NumAdditionalSamplesFixed={to_string(params.num_additional_samples_fixed)}",
        f"ReducedDimensionIndex={to_string(params.reduced_dimension_index)}",
        f"UseMovingImageDerivativeScales={to_string(params.use_moving_image_derivative_scales)}",
        f"MovingImageDerivativeScales={vector(params.moving_image_derivative_scales)}",
        f"TransformIsStackTransform={to_string(params.is_stack_transform)}",
        f"GridSize={vector(params.grid_size)}",
    ]
    return f"Level {level}: " + " ".join(fields)


def _read_run_setting(configuration: Configuration, key: str, default: int) -> int:
    _, value = configuration.read_parameter(key, default=default, lenient=True)
    return value


def run(args) -> int:
    """Resolve and print the per-level settings"""
    configuration = load_configuration(args.parameter_file, preset=args.preset)

    levels = args.levels if args.levels is not None else _read_run_setting(configuration, "NumberOfResolutions", 1)
    dimension = args.dimension if args.dimension is not None else _read_run_setting(
        configuration, "MovingImageDimension", 3
    )
    if levels < 1:
        raise ValueError(f"Number of levels must be >= 1, got {levels}")
    if dimension < 2:
        raise ValueError(f"Image dimension must be >= 2, got {dimension}")

    transform = build_transform(args.transform, dimension, args.grid_size, args.sub_transforms)
    registration = RegistrationState(number_of_levels=levels, transform=transform)
    metric = PCAMetric3(configuration, registration, component_label=args.label, dimension=dimension)

    logger.info(f"{metric.name} ({args.label}): {levels} levels, dimension {dimension}, transform {args.transform}")
    for level in registration.levels():
        metric.before_each_resolution()
        print(format_parameters(level, metric.parameters))

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = parse_args(argv)
    setup_logging("DEBUG" if args.verbose else "INFO", args.log_file)

    try:
        return run(args)
    except Exception as e:
        logger.error(f"pcareg-levels failed: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
