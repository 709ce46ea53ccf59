"""
Unit tests for the request verifier — CSR self-signature check.
"""

from __future__ import annotations

from unittest.mock import MagicMock, PropertyMock

from cryptography.exceptions import UnsupportedAlgorithm
from railway import ResultAssertions

from csr_signer.adapters.pem_decoder import decode_inputs
from csr_signer.adapters.request_verifier import verify_request
from csr_signer.domain.errors import IssuanceErrorCode
from csr_signer.domain.models import DecodedInputs


def _decoded(ca, csr_pem: bytes) -> DecodedInputs:
    return ResultAssertions.assert_success(decode_inputs(ca.key_pem, ca.certificate_pem, csr_pem))


class TestVerifyRequest:
    def test_valid_csr_passes_through(self, rsa_ca, csr_pem: bytes) -> None:
        """
        GIVEN a correctly self-signed CSR
        WHEN verify_request is called
        THEN it returns the same DecodedInputs.
        """
        inputs = _decoded(rsa_ca, csr_pem)
        result = verify_request(inputs)
        assert ResultAssertions.assert_success(result) is inputs

    def test_tampered_csr_rejected(self, rsa_ca, tampered_csr_pem: bytes) -> None:
        """
        GIVEN a CSR whose signature has one bit flipped
        WHEN verify_request is called
        THEN it fails with SIGNATURE_VERIFICATION_ERROR.
        """
        inputs = _decoded(rsa_ca, tampered_csr_pem)
        result = verify_request(inputs)
        ResultAssertions.assert_failure(result, IssuanceErrorCode.SIGNATURE_VERIFICATION_ERROR)
        ResultAssertions.assert_failure_message_contains(result, "does not match")

    def test_ec_and_ed25519_csrs_verify(self, rsa_ca, ec_ca, ed25519_ca, make_csr) -> None:
        for signer in (ec_ca, ed25519_ca):
            inputs = _decoded(rsa_ca, make_csr(signer.key))
            ResultAssertions.assert_success(verify_request(inputs))

    def test_unverifiable_signature_rejected(self, rsa_ca, csr_pem: bytes) -> None:
        """
        GIVEN a CSR whose signature algorithm cannot be checked
        WHEN verify_request is called
        THEN the library error becomes SIGNATURE_VERIFICATION_ERROR with the exception attached.
        """
        inputs = _decoded(rsa_ca, csr_pem)
        csr = MagicMock()
        type(csr).is_signature_valid = PropertyMock(
            side_effect=UnsupportedAlgorithm("unknown signature algorithm")
        )
        broken = DecodedInputs(
            private_key=inputs.private_key,
            ca_certificate=inputs.ca_certificate,
            csr=csr,
        )

        result = verify_request(broken)

        error = ResultAssertions.assert_failure(
            result, IssuanceErrorCode.SIGNATURE_VERIFICATION_ERROR
        )
        assert isinstance(error.exception, UnsupportedAlgorithm)
