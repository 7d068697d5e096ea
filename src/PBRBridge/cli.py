"""Command-line interface for the texture converter."""

import argparse
import logging
import os
import sys

from .config import ConversionDirection, ConverterConfig, OUTPUT_FORMATS
from .core import ConversionResult, find_labpbr_base_texture, setup_logging

logger = logging.getLogger("pbr_bridge")


def _quality(value: str) -> int:
    try:
        level = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"quality must be an integer, got '{value}'")
    if not 1 <= level <= 10:
        raise argparse.ArgumentTypeError(f"quality must be in 1-10, got {level}")
    return level


def _add_output_args(parser: argparse.ArgumentParser, normal_options: bool = True):
    parser.add_argument("--output", "-o",
                        help="Output directory (defaults to the input's directory)")
    parser.add_argument("--format", "-f", choices=OUTPUT_FORMATS,
                        help="Output format (default: png)")
    parser.add_argument("--quality", "-q", type=_quality,
                        help="Compression level 1-10 (default: 8)")
    if normal_options:
        parser.add_argument("--bake-ao", "-b", action="store_true", default=None,
                            help="Bake ambient occlusion into the base color texture")
        height = parser.add_mutually_exclusive_group()
        height.add_argument("--extract-height", "-e", dest="extract_height",
                            action="store_true", default=None,
                            help="Extract the heightmap from the normal alpha (default)")
        height.add_argument("--no-extract-height", dest="extract_height",
                            action="store_false",
                            help="Skip heightmap extraction")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pbr-bridge",
        description="Convert textures between packed MER and LabPBR",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pbr-bridge convert stone_mer.png
  pbr-bridge convert-to-bedrock stone_s.png -n stone_n.png -b
  pbr-bridge convert-auto stone_n.png -d to-bedrock -o ./out
  pbr-bridge convert-dir ./textures -r -f jpg -q 9
  pbr-bridge --generate-config
        """
    )
    parser.add_argument("--config", help="Path to config YAML")
    parser.add_argument("--log-level",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument("--generate-config", action="store_true",
                        help="Write a default config.yaml and exit")

    sub = parser.add_subparsers(dest="command")

    convert = sub.add_parser("convert", help="Convert a MER texture to LabPBR")
    convert.add_argument("mer_texture", help="Path to the MER texture")
    convert.add_argument("--color", "-c",
                         help="Base color texture (looked up when omitted)")
    _add_output_args(convert, normal_options=False)

    to_bedrock = sub.add_parser("convert-to-bedrock",
                                help="Convert LabPBR textures to MER")
    to_bedrock.add_argument("specular_texture", help="Path to the LabPBR _s texture")
    to_bedrock.add_argument("--normal", "-n", required=True,
                            help="Path to the LabPBR _n texture")
    to_bedrock.add_argument("--color", "-c",
                            help="Base color texture (looked up when omitted)")
    _add_output_args(to_bedrock)

    auto = sub.add_parser("convert-auto",
                          help="Detect the format of a texture set and convert it")
    auto.add_argument("texture", help="Any texture of the set (base, MER, _s or _n)")
    auto.add_argument("--direction", "-d", default="auto",
                      choices=[d.value for d in ConversionDirection],
                      help="Force a conversion direction")
    _add_output_args(auto)

    batch = sub.add_parser("convert-dir", help="Convert every texture set in a directory")
    batch.add_argument("input_dir", help="Directory containing textures")
    batch.add_argument("--recursive", "-r", action="store_true", default=None,
                       help="Process subdirectories")
    _add_output_args(batch)

    return parser


def _apply_overrides(config: ConverterConfig, args: argparse.Namespace):
    if args.log_level:
        config.log_level = args.log_level
    if args.log_file:
        config.log_file = args.log_file
    if getattr(args, "format", None):
        config.output.format = args.format
    if getattr(args, "quality", None) is not None:
        config.output.quality = args.quality
    if getattr(args, "output", None):
        config.output.output_dir = args.output
    if getattr(args, "bake_ao", None) is not None:
        config.normal.bake_ao = args.bake_ao
    if getattr(args, "extract_height", None) is not None:
        config.normal.extract_height = args.extract_height
    if getattr(args, "recursive", None) is not None:
        config.batch.recursive = args.recursive


def _report(result: ConversionResult, show_direction: bool = False) -> bool:
    if result.success:
        print("Conversion successful!")
        if show_direction and result.direction is not None:
            print(f"Direction: {result.direction.value}")
        print("Output files:")
        for kind, path in result.output_paths.items():
            print(f"- {kind}: {path}")
        return True
    print("Conversion failed:", file=sys.stderr)
    for message in result.messages:
        print(f"- {message}", file=sys.stderr)
    return False


def _cmd_convert(args, converter) -> bool:
    print(f"Converting {args.mer_texture} from Bedrock to LabPBR...")
    result = converter.labpbr.convert_texture(args.mer_texture, args.color, args.output)
    return _report(result)


def _cmd_convert_to_bedrock(args, converter) -> bool:
    print(f"Converting {args.specular_texture} from LabPBR to Bedrock...")
    base_path = args.color
    if not base_path:
        base_path = find_labpbr_base_texture(args.specular_texture)
        if not base_path:
            print("Error: Could not find base color texture. "
                  "Please provide it with -c option.", file=sys.stderr)
            return False
        print(f"Found base color texture: {os.path.basename(base_path)}")
    result = converter.bedrock.convert_labpbr_to_bedrock(
        args.specular_texture, args.normal, base_path, args.output
    )
    return _report(result)


def _cmd_convert_auto(args, converter) -> bool:
    print(f"Analyzing {args.texture} for automatic conversion...")
    result = converter.convert_auto(
        args.texture, args.output, ConversionDirection(args.direction)
    )
    return _report(result, show_direction=True)


def _cmd_convert_dir(args, converter) -> bool:
    print(f"Processing directory {args.input_dir}...")
    if not os.path.isdir(args.input_dir):
        print(f"Error: Input directory not found: {args.input_dir}", file=sys.stderr)
        return False
    results = converter.convert_directory(args.input_dir, args.output)
    if not results:
        print("Error: No texture files found in the specified directory",
              file=sys.stderr)
        return False

    for result in results:
        status = "ok" if result.success else "FAILED"
        print(f"[{status}] {result.source_path}")
        if result.success:
            for kind, path in result.output_paths.items():
                print(f"  - {kind}: {os.path.basename(path)}")
        else:
            for message in result.messages:
                print(f"  - {message}", file=sys.stderr)

    summary = converter.summarize(results)
    print("\nConversion complete!")
    print(f"Successfully converted: {summary['succeeded']} texture sets")
    print(f"Failed conversions: {summary['failed']} texture sets")
    return summary["failed"] == 0


def main(argv=None):
    """Parse CLI arguments, run the requested conversion, and exit non-zero on failure."""
    commands = {
        "convert": _cmd_convert,
        "convert-to-bedrock": _cmd_convert_to_bedrock,
        "convert-auto": _cmd_convert_auto,
        "convert-dir": _cmd_convert_dir,
    }

    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.generate_config:
        dest = args.config or "config.yaml"
        if os.path.isdir(dest):
            dest = os.path.join(dest, "config.yaml")
        ConverterConfig().to_yaml(dest)
        print(f"Generated default {dest}")
        return

    if args.command not in commands:
        parser.print_help()
        sys.exit(1)

    if args.config:
        if not os.path.exists(args.config):
            print(f"Error: Config file not found: {args.config}", file=sys.stderr)
            sys.exit(1)
        try:
            config = ConverterConfig.from_yaml(args.config)
        except ValueError as e:
            print(f"Error: Invalid config: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        config = ConverterConfig()

    _apply_overrides(config, args)
    try:
        config.validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config.log_level, config.log_file or None)

    from .pipeline import BidirectionalConverter
    converter = BidirectionalConverter(config)

    try:
        ok = commands[args.command](args, converter)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        sys.exit(130)

    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
