"""
Command-line entry point — the host around the signing pipeline.

Composition root: loads settings, reads the CA material and the CSR from
disk (or stdin), calls sign_csr() and writes the certificate out. This is
the only module that touches the filesystem.

    CSR_SIGNER_CA__KEY_PATH=ca.key CSR_SIGNER_CA__CERTIFICATE_PATH=ca.crt \\
        csr-signer request.csr -o issued.crt

The exit status tells the caller which stage failed, so shell scripts can
branch on it without parsing log output.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import structlog
from pydantic import ValidationError
from railway.failure import FailureDescription

from csr_signer import __version__
from csr_signer.config import AppSettings
from csr_signer.crypto_init import init_crypto
from csr_signer.domain.errors import IssuanceErrorCode
from csr_signer.pipeline import sign_csr

EXIT_OK = 0
EXIT_HOST_ERROR = 1

EXIT_CODES: dict[IssuanceErrorCode, int] = {
    IssuanceErrorCode.DECODE_ERROR: 2,
    IssuanceErrorCode.SIGNATURE_VERIFICATION_ERROR: 3,
    IssuanceErrorCode.BUILD_ERROR: 4,
    IssuanceErrorCode.SIGNING_ERROR: 5,
    IssuanceErrorCode.ENCODING_ERROR: 6,
}


def configure_structlog(log_level: str = "INFO") -> None:
    """
    Configure structlog for human-readable console logging on stderr.

    stdout is reserved for the issued certificate.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="csr-signer",
        description="Sign a PEM certificate signing request with the configured CA.",
    )
    parser.add_argument(
        "csr",
        help="path to the PEM CSR, or '-' to read it from stdin",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="write the signed certificate here instead of stdout",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def _read_csr(source: str) -> bytes:
    if source == "-":
        return sys.stdin.buffer.read()
    return Path(source).read_bytes()


def _write_certificate(pem: bytes, output: Path | None) -> None:
    if output is None:
        sys.stdout.buffer.write(pem)
        sys.stdout.flush()
    else:
        output.write_bytes(pem)


def exit_code_for(error: FailureDescription) -> int:
    """Map a pipeline failure to the process exit status."""
    if isinstance(error.code, IssuanceErrorCode):
        return EXIT_CODES[error.code]
    return EXIT_HOST_ERROR


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, load settings, issue one certificate. Returns the exit status."""
    args = _parse_args(argv)

    try:
        settings = AppSettings()
    except ValidationError as e:
        print(f"FATAL: Configuration error — {e}", file=sys.stderr)  # noqa: T201
        return EXIT_HOST_ERROR

    configure_structlog(settings.log_level)
    log = structlog.get_logger()
    init_crypto()

    if settings.issuance.serial_strategy == "sequential":
        log.warning(
            "app.sequential_serial_not_persisted",
            serial=settings.issuance.serial_start,
            hint="advance CSR_SIGNER_ISSUANCE__SERIAL_START before the next run",
        )

    try:
        key_pem = settings.ca.key_path.read_bytes()
        ca_pem = settings.ca.certificate_path.read_bytes()
        csr_pem = _read_csr(args.csr)
    except OSError as e:
        log.error("app.read_failed", error=str(e))
        return EXIT_HOST_ERROR

    result = sign_csr(
        key_pem,
        ca_pem,
        csr_pem,
        passphrase=settings.ca.passphrase_bytes(),
        serial_numbers=settings.issuance.serial_numbers(),
        validity=settings.issuance.validity,
    )

    if result.is_failure():
        error = result.error()
        log.error("app.issuance_failed", code=error.code.value, error=error.describe())
        return exit_code_for(error)

    try:
        _write_certificate(result.value(), args.output)
    except OSError as e:
        log.error("app.write_failed", error=str(e))
        return EXIT_HOST_ERROR

    log.info("app.certificate_written", output=str(args.output) if args.output else "stdout")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
