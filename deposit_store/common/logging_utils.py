# Copyright 2026 Dell Inc. or its subsidiaries. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Logging utilities for the deposit store.

Every message about a deposit is prefixed with ``[<deposit id>]`` so that
operators can follow one deposit through the logs, and sensitive values
(tokens, passwords, e-mail addresses) are redacted before they are written.
"""

import logging
import re
import sys
from typing import Any, Mapping, MutableMapping, Optional, Tuple, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# ---------------------------------------------------------------------------
# Sensitive-data redaction patterns
# ---------------------------------------------------------------------------
_SENSITIVE_PATTERNS = [
    # JWT / Bearer tokens  (three base64url segments separated by dots)
    (re.compile(r"eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+"), "<REDACTED_TOKEN>"),
    # Authorization header values
    (re.compile(r"(?i)(bearer\s+)[A-Za-z0-9_\-\.]+"), r"\1<REDACTED_TOKEN>"),
    # password= or passwd= or secret= or api_key= or token= values
    (re.compile(
        r"(?i)((?:password|passwd|secret|api_key|apikey|token|auth_token)"
        r"\s*[=:]\s*)[^\s,;\"']+"
    ), r"\1<REDACTED>"),
    # Email addresses
    (re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"), "<REDACTED_EMAIL>"),
]


def sanitize_message(message: str) -> str:
    """Redact sensitive data from a log message."""
    for pattern, replacement in _SENSITIVE_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


def configure_logging(level: Union[str, int] = "INFO") -> None:
    """Install the default stdout handler and format on the root logger.

    Args:
        level: Level name (``'DEBUG'``, ``'INFO'``, ...) or numeric level.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


class DepositLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that tags every message with a deposit id.

    The message is formatted with its arguments before redaction, so
    sensitive values passed as ``%s`` arguments are redacted as well.
    Arguments that do not fit the message are passed on unformatted, so the
    handler reports the mismatch instead of the logging call raising.
    """

    def __init__(self, logger: logging.Logger, deposit_id: Optional[str]) -> None:
        super().__init__(logger, {"deposit_id": deposit_id})
        self.deposit_id = deposit_id

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("deposit_id", self.deposit_id)
        kwargs["extra"] = extra
        if self.deposit_id:
            msg = f"[{self.deposit_id}] {msg}"
        return msg, kwargs

    def log(self, level: int, msg: Any, *args: Any, **kwargs: Any) -> None:
        if not self.isEnabledFor(level):
            return
        text = str(msg)
        if args:
            values = args
            if len(args) == 1 and isinstance(args[0], Mapping) and args[0]:
                values = args[0]
            try:
                formatted: Optional[str] = text % values
            except (TypeError, ValueError, KeyError):
                # left to the handler, which reports it through handleError
                formatted = None
            if formatted is not None:
                text, args = formatted, ()
        msg, kwargs = self.process(sanitize_message(text), kwargs)
        # report the caller of info()/warning(), not this method
        kwargs["stacklevel"] = kwargs.get("stacklevel", 1) + 1
        self.logger.log(level, msg, *args, **kwargs)


def deposit_logger(
    deposit_id: Optional[str], logger: Optional[logging.Logger] = None
) -> DepositLoggerAdapter:
    """Return a deposit-tagged adapter around *logger* (default: this module's)."""
    return DepositLoggerAdapter(logger or logging.getLogger(__name__), deposit_id)
