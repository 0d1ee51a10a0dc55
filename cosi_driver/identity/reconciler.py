"""
Pure merge functions over an IdentityDocument.

Each function returns a new document and leaves its argument untouched, so
the access layer can compare before/after and skip no-op writes.
"""

from collections.abc import Iterable

from cosi_driver.identity.models import Credential, Identity, IdentityDocument

DEFAULT_VERBS = ("Read", "Write", "List", "Tagging")


def bucket_actions(bucket: str, verbs: Iterable[str] = DEFAULT_VERBS) -> list[str]:
    """Build the action strings granting ``verbs`` on ``bucket``."""
    return [f"{verb}:{bucket}" for verb in verbs]


def grant(
    doc: IdentityDocument,
    name: str,
    credential: Credential | None = None,
    actions: Iterable[str] = (),
) -> IdentityDocument:
    """
    Add a credential and a set of actions to identity ``name``.

    The identity is created when missing. A credential equal to one already
    recorded is not appended again, and actions are unioned in first-seen
    order, so applying the same grant twice leaves the document as it was
    after the first application.
    """
    result = doc.model_copy(deep=True)

    identity = result.get(name)
    if identity is None:
        identity = Identity(name=name)
        result.identities.append(identity)

    if credential is not None and not identity.has_credential(credential):
        identity.credentials.append(credential.model_copy())

    for action in actions:
        if action not in identity.actions:
            identity.actions.append(action)

    return result


def revoke(doc: IdentityDocument, name: str) -> IdentityDocument:
    """
    Remove identity ``name`` with all of its credentials and actions.

    Revoking an identity that does not exist returns an equal document.
    """
    result = doc.model_copy(deep=True)
    result.identities = [i for i in result.identities if i.name != name]
    return result


def revoke_bucket(doc: IdentityDocument, name: str, bucket: str) -> IdentityDocument:
    """
    Remove the actions identity ``name`` holds on ``bucket``.

    Grants on other buckets are kept. An identity whose last action is
    removed here is dropped along with its credentials; an identity with no
    action on ``bucket`` is left untouched, even if it holds no actions.
    """
    result = doc.model_copy(deep=True)

    identity = result.get(name)
    if identity is None:
        return result

    remaining = [a for a in identity.actions if a.partition(":")[2] != bucket]
    if len(remaining) == len(identity.actions):
        return result

    identity.actions = remaining
    if not remaining:
        result.identities = [i for i in result.identities if i.name != name]

    return result
