"""
Logging configuration for the journal CLI.

Library modules only create loggers; handlers are attached here. Without a
handler, journal warnings (e.g. embedding fallback) still reach stderr through
logging's last-resort handler.
"""

import logging
import os
import sys
import warnings

_NOISY_LOGGERS = ("sentence_transformers", "transformers", "LiteLLM", "litellm", "httpx")


def configure_quiet_mode(quiet: bool = True) -> None:
    """
    Suppress verbose third-party output.

    This silences HuggingFace progress bars and model-loading chatter,
    LiteLLM request logging, and httpx request lines.
    """
    if not quiet:
        return

    os.environ.setdefault("HF_HUB_DISABLE_PROGRESS_BARS", "1")
    os.environ.setdefault("TRANSFORMERS_VERBOSITY", "error")
    os.environ.setdefault("TOKENIZERS_PARALLELISM", "false")

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.ERROR)


def enable_debug_mode() -> None:
    """Enable debug-level logging to stderr."""
    warnings.filterwarnings("default")
    os.environ.pop("HF_HUB_DISABLE_PROGRESS_BARS", None)
    os.environ.pop("TRANSFORMERS_VERBOSITY", None)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    if not any(isinstance(h, logging.StreamHandler) and h.stream == sys.stderr
               for h in root_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%H:%M:%S"
        ))
        root_logger.addHandler(handler)

    for name in ("private_journal", "sentence_transformers", "LiteLLM"):
        logging.getLogger(name).setLevel(logging.DEBUG)
