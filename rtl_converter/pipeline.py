"""
RTL Conversion Pipeline

This module orchestrates the complete conversion, coordinating
translation, font loading, text application and layout mirroring.
"""

import logging
import time
import os
from typing import Any, Dict, List, Optional

import yaml

from .backoff import Sleeper
from .channel import LoggingChannel, MessageChannel
from .document import DocumentHost
from .fonts import FontUnavailableError, load_target_fonts
from .mirror import mirror_fixed_positions, mirror_horizontal_layouts
from .models import ConversionResult, FontName, LogType, ScanResult
from .scanner import scan_page, unique_texts
from .text_applicator import apply_translations, right_align_all_text
from .translator import GeminiBackend, Translator

logger = logging.getLogger(__name__)


class RTLConversionPipeline:
    """
    Main orchestrator for the RTL conversion pipeline.

    This class sequences all components:
    1. Translation (batched, with model fallback)
    2. Target font loading
    3. Text application and right alignment
    4. Flow and fixed-position layout mirroring
    """

    def __init__(
        self,
        config: Dict[str, Any] = None,
        config_path: str = None,
        channel: Optional[MessageChannel] = None,
        sleeper: Optional[Sleeper] = None,
    ):
        """
        Initialize the conversion pipeline.

        Args:
            config: Configuration dictionary
            config_path: Path to YAML configuration file
            channel: UI message channel (defaults to logging only)
            sleeper: Delay primitive used between retries and batches
        """
        # Load configuration
        if config_path and os.path.exists(config_path):
            with open(config_path, 'r') as f:
                self.config = yaml.safe_load(f)
        else:
            self.config = config or self._get_default_config()

        self.channel = channel or LoggingChannel()
        self.sleeper = sleeper or Sleeper()

        logger.info("RTLConversionPipeline initialized")

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "translation": {
                "endpoint": "https://generativelanguage.googleapis.com/v1beta",
                "models": [
                    "gemini-2.0-flash-lite",
                    "gemini-2.0-flash",
                    "gemini-1.5-flash",
                    "gemini-1.5-flash-8b",
                ],
                "batch_size": 50,
                "max_attempts": 3,
                "default_retry_delay": 30,
                "retry_padding": 5,
                "max_retry_delay": 60,
                "batch_pause": 2.0,
                "temperature": 0.1,
                "timeout": 60.0,
            },
            "fonts": {
                "styles": ["Regular", "Bold", "Medium", "SemiBold", "Light"],
                "fallback_family": "Inter",
                "fallback_style": "Regular",
            },
            "mirror": {
                "tolerance": 0.5,
            },
            "storage": {
                "path": "~/.config/rtl-converter/storage.json",
            },
        }

    def create_translator(self, api_key: str) -> Translator:
        """Build a Gemini translator from the translation config section."""
        trans_config = self.config.get("translation", {})
        backend = GeminiBackend(
            api_key=api_key,
            endpoint=trans_config.get("endpoint", "https://generativelanguage.googleapis.com/v1beta"),
            temperature=trans_config.get("temperature", 0.1),
            timeout=trans_config.get("timeout", 60.0),
        )
        return Translator(
            backend=backend,
            models=trans_config.get("models"),
            batch_size=trans_config.get("batch_size", 50),
            max_attempts=trans_config.get("max_attempts", 3),
            batch_pause=trans_config.get("batch_pause", 2.0),
            default_retry_delay=trans_config.get("default_retry_delay", 30),
            retry_padding=trans_config.get("retry_padding", 5),
            max_retry_delay=trans_config.get("max_retry_delay", 60),
            sleeper=self.sleeper,
            channel=self.channel,
        )

    def scan(self, host: DocumentHost) -> ScanResult:
        """Scan the current page and post the result to the UI."""
        result = scan_page(host.current_page)
        self.channel.post(result.to_message())
        return result

    async def convert(
        self,
        host: DocumentHost,
        api_key: str,
        target_language: str,
        font_family: str,
        texts: List[str],
        translator: Optional[Any] = None,
    ) -> ConversionResult:
        """
        Convert the host's current page to RTL.

        Args:
            host: Document host owning the page
            api_key: Translation API credential
            target_language: Target language code (ar, he, fa, ur)
            font_family: Target font family name
            texts: Unique source strings from a previous scan
            translator: Object with ``async translate(texts, lang)``;
                a Gemini translator is built when None

        Returns:
            ConversionResult with the counts of this run. Errors are
            reported to the UI and the host, never raised.
        """
        start_time = time.time()
        result = ConversionResult()
        page = host.current_page

        try:
            # Step 1: Translate
            self.channel.progress(5, "Sending texts to Gemini for translation...")
            texts = unique_texts(texts)
            if translator is None:
                translator = self.create_translator(api_key)
                async with translator.backend:
                    translations = await translator.translate(texts, target_language)
            else:
                translations = await translator.translate(texts, target_language)
            result.translations_received = len(translations)
            self.channel.log(f"Gemini returned {len(translations)} translations", LogType.SUCCESS)

            # Step 2: Load target font
            self.channel.progress(45, f"Loading {font_family} font...")
            font_config = self.config.get("fonts", {})
            available_fonts = await load_target_fonts(host, font_family, font_config.get("styles"))
            if not available_fonts:
                raise FontUnavailableError(font_family)
            result.fonts_loaded = len(available_fonts)
            self.channel.log(f"Loaded {len(available_fonts)} font weights for {font_family}")

            # Step 3: Apply translations
            self.channel.progress(55, "Applying translations...")
            fallback_font = FontName(
                font_config.get("fallback_family", "Inter"),
                font_config.get("fallback_style", "Regular"),
            )
            result.translated = await apply_translations(
                host, page, translations, available_fonts, fallback_font
            )
            self.channel.log(f"Applied {result.translated} translations", LogType.SUCCESS)

            # Step 4: Right-align all text
            self.channel.progress(70, "Setting right alignment...")
            result.aligned = await right_align_all_text(host, page)
            self.channel.log(f"Right-aligned {result.aligned} text nodes")

            # Step 5: Mirror horizontal layouts
            self.channel.progress(80, "Mirroring horizontal layouts...")
            result.mirrored_layouts = mirror_horizontal_layouts(page)
            self.channel.log(f"Reversed {result.mirrored_layouts} horizontal layouts", LogType.SUCCESS)

            # Step 6: Mirror fixed positions
            self.channel.progress(90, "Mirroring fixed positions...")
            tolerance = self.config.get("mirror", {}).get("tolerance", 0.5)
            result.mirrored_fixed = mirror_fixed_positions(page, tolerance)
            self.channel.log(f"Mirrored {result.mirrored_fixed} fixed elements", LogType.SUCCESS)

        except FontUnavailableError as e:
            logger.error(str(e))
            return self._fail(host, result, e, start_time)
        except Exception as e:
            logger.exception("RTL conversion failed")
            return self._fail(host, result, e, start_time)

        result.success = True
        result.processing_time_seconds = time.time() - start_time
        self.channel.done(result.translated, result.mirrored)
        host.notify(
            f"RTL conversion complete! Translated: {result.translated}, Mirrored: {result.mirrored}",
            timeout=5000,
        )
        logger.info(f"Conversion complete in {result.processing_time_seconds:.2f}s")
        return result

    def _fail(
        self,
        host: DocumentHost,
        result: ConversionResult,
        error: Exception,
        start_time: float,
    ) -> ConversionResult:
        """Report a halted run. Mutations applied so far stay in place."""
        result.error = str(error)
        result.processing_time_seconds = time.time() - start_time
        self.channel.error(str(error))
        host.notify(f"Error: {error}", error=True)
        return result


def create_pipeline_from_config(config_path: str, **kwargs) -> RTLConversionPipeline:
    """
    Factory function to create a pipeline from a config file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Configured RTLConversionPipeline instance
    """
    return RTLConversionPipeline(config_path=config_path, **kwargs)
