#!/usr/bin/env python3
"""
RTL Converter

Main entry point for converting an exported design page to RTL.

Usage:
    python run.py --input <page.json> [--output <out.json>] [--lang ar] [--font "Noto Sans Arabic"]
    python run.py --help

Examples:
    # Show what would be translated
    python run.py --input "home.json" --scan

    # Convert to Arabic, key from GEMINI_API_KEY
    python run.py --input "home.json" --lang ar --font "Noto Sans Arabic"

    # Remember the API key for later runs
    python run.py --save-key "<key>"
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from rtl_converter.document import InMemoryDocumentHost, load_document, save_document
from rtl_converter.handler import MessageHandler
from rtl_converter.pipeline import RTLConversionPipeline
from rtl_converter.storage import STORAGE_KEY, JsonFileKeyStore


def setup_logging(log_level: str = "INFO"):
    """Configure logging for the application."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="RTL Converter - Translates a design page and mirrors its layout for RTL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python run.py --input "home.json" --scan
    python run.py --input "home.json" --lang he --font "Rubik"
    python run.py --input "home.json" --output "outputs/home_rtl.json" --verbose
        """
    )

    parser.add_argument(
        "-i", "--input",
        help="Path to the page JSON export"
    )

    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Path for the converted page (default: outputs/<input>_rtl.json)"
    )

    parser.add_argument(
        "-c", "--config",
        default="config/config.yaml",
        help="Path to configuration file (default: config/config.yaml)"
    )

    parser.add_argument(
        "-l", "--lang",
        default="ar",
        help="Target language code: ar, he, fa, ur (default: ar)"
    )

    parser.add_argument(
        "-f", "--font",
        default="Noto Sans Arabic",
        help="Target font family (default: Noto Sans Arabic)"
    )

    parser.add_argument(
        "--fonts",
        default=None,
        help="Comma-separated font families installed on this host (default: all)"
    )

    parser.add_argument(
        "--api-key",
        default=None,
        help="Gemini API key (default: GEMINI_API_KEY or the saved key)"
    )

    parser.add_argument(
        "--save-key",
        default=None,
        metavar="KEY",
        help="Save a Gemini API key for later runs and exit"
    )

    parser.add_argument(
        "--scan",
        action="store_true",
        help="Only scan the page and print a summary"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    return parser.parse_args(argv)


async def run(args, logger) -> int:
    config_path = args.config if os.path.exists(args.config) else None
    pipeline = RTLConversionPipeline(config_path=config_path)
    key_store = JsonFileKeyStore(
        pipeline.config.get("storage", {}).get("path", "~/.config/rtl-converter/storage.json")
    )

    if args.save_key:
        await key_store.set(STORAGE_KEY, args.save_key)
        logger.info("API key saved!")
        return 0

    if not args.input:
        logger.error("--input is required")
        return 1
    if not os.path.exists(args.input):
        logger.error(f"Input file not found: {args.input}")
        return 1

    available_fonts = None
    if args.fonts:
        available_fonts = [f.strip() for f in args.fonts.split(",") if f.strip()]

    page = load_document(args.input)
    host = InMemoryDocumentHost(page, available_fonts=available_fonts)
    handler = MessageHandler(host, pipeline, key_store)

    scan = await handler.handle({"type": "scan"})
    logger.info(f"Page: {scan.page_name}")
    logger.info(f"  Frames: {scan.frame_count}")
    logger.info(f"  Texts: {scan.total_texts} ({len(scan.unique_texts)} unique)")
    logger.info(f"  Auto layouts: {scan.layout_count}")
    if args.scan:
        return 0

    api_key = args.api_key or os.environ.get("GEMINI_API_KEY") or await handler.start()
    if not api_key:
        logger.error("No API key: pass --api-key, set GEMINI_API_KEY or use --save-key")
        return 1

    result = await handler.handle({
        "type": "convert",
        "apiKey": api_key,
        "targetLang": args.lang,
        "fontFamily": args.font,
        "texts": scan.unique_texts,
    })
    if not result.success:
        logger.error(f"Conversion failed: {result.error}")
        return 1

    output_path = args.output
    if output_path is None:
        base_name = os.path.splitext(os.path.basename(args.input))[0]
        output_path = os.path.join("outputs", f"{base_name}_rtl.json")
    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    save_document(page, output_path)

    summary = result.get_summary()
    logger.info("=" * 60)
    logger.info("Conversion Summary:")
    logger.info(f"  Translations received: {summary['translations_received']}")
    logger.info(f"  Text nodes translated: {summary['translated']}")
    logger.info(f"  Text nodes right-aligned: {summary['aligned']}")
    logger.info(f"  Layouts reversed: {summary['mirrored_layouts']}")
    logger.info(f"  Fixed elements mirrored: {summary['mirrored_fixed']}")
    logger.info(f"  Processing time: {summary['processing_time_seconds']:.2f}s")
    logger.info(f"  Output saved to: {output_path}")
    logger.info("=" * 60)
    return 0


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    # Setup logging
    log_level = "DEBUG" if args.verbose else "INFO"
    setup_logging(log_level)

    logger = logging.getLogger(__name__)

    try:
        exit_code = asyncio.run(run(args, logger))
    except Exception as e:
        logger.error(f"Processing failed: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
