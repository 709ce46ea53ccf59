"""
csr_signer — issue X.509 certificates from certificate signing requests.

Given a CA private key, the CA certificate and a CSR (all PEM bytes),
verifies the CSR self-signature and returns a new certificate signed by
the CA, bound to the CSR's subject and public key.

Built on the Railway-Oriented Programming (ROP) framework: sign_csr()
returns a Result instead of raising, and failures carry a typed
IssuanceErrorCode.
"""

from csr_signer.crypto_init import init_crypto
from csr_signer.domain.errors import IssuanceErrorCode
from csr_signer.pipeline import sign_csr

__all__ = ["IssuanceErrorCode", "init_crypto", "sign_csr"]

__version__ = "0.1.0"
