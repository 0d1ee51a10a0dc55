"""
Identity document model, codec and reconciliation.
"""

from cosi_driver.identity.models import Credential, Identity, IdentityDocument
from cosi_driver.identity.codec import decode, encode
from cosi_driver.identity.reconciler import (
    DEFAULT_VERBS,
    bucket_actions,
    grant,
    revoke,
    revoke_bucket,
)
from cosi_driver.identity.credentials import generate_credential

__all__ = [
    "Credential",
    "Identity",
    "IdentityDocument",
    "decode",
    "encode",
    "DEFAULT_VERBS",
    "bucket_actions",
    "grant",
    "revoke",
    "revoke_bucket",
    "generate_credential",
]
