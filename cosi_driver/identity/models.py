"""
In-memory form of the identity document.

The persisted shape follows the SeaweedFS ``identity.json`` layout: a list of
identities, each with camelCase credential keys. Unknown fields are kept
so a decode/encode cycle never drops data written by other tools.
"""

from pydantic import BaseModel, Field, field_validator


class Credential(BaseModel):
    """An access key / secret key pair."""

    access_key: str = Field(..., alias="accessKey", description="S3 access key ID")
    secret_key: str = Field(
        ..., alias="secretKey", repr=False, description="S3 secret access key"
    )

    class Config:
        populate_by_name = True
        extra = "allow"


class Identity(BaseModel):
    """
    A named principal.

    ``credentials`` is append-only and keeps insertion order. ``actions``
    behaves like an ordered set of ``<Verb>:<BucketName>`` strings.
    """

    name: str = Field(..., description="Unique account name")
    credentials: list[Credential] = Field(default_factory=list)
    actions: list[str] = Field(default_factory=list)

    class Config:
        extra = "allow"

    @field_validator("actions")
    @classmethod
    def _unique_actions(cls, actions: list[str]) -> list[str]:
        seen = set()
        for action in actions:
            if action in seen:
                raise ValueError(f"duplicate action '{action}'")
            seen.add(action)
        return actions

    def has_credential(self, credential: Credential) -> bool:
        return any(
            c.access_key == credential.access_key and c.secret_key == credential.secret_key
            for c in self.credentials
        )

    def buckets(self) -> list[str]:
        """Bucket names referenced by this identity's actions, first-seen order."""
        names: list[str] = []
        for action in self.actions:
            _, _, bucket = action.partition(":")
            if bucket and bucket not in names:
                names.append(bucket)
        return names


class IdentityDocument(BaseModel):
    """
    The whole identity configuration.

    Example:
        doc = IdentityDocument()
        doc = grant(doc, "alice", Credential(access_key="AK", secret_key="SK"),
                    bucket_actions("b1"))
        assert "alice" in doc
    """

    identities: list[Identity] = Field(default_factory=list)

    class Config:
        extra = "allow"

    @field_validator("identities")
    @classmethod
    def _unique_names(cls, identities: list[Identity]) -> list[Identity]:
        seen = set()
        for identity in identities:
            if identity.name in seen:
                raise ValueError(f"duplicate identity '{identity.name}'")
            seen.add(identity.name)
        return identities

    def get(self, name: str) -> Identity | None:
        for identity in self.identities:
            if identity.name == name:
                return identity
        return None

    def names(self) -> list[str]:
        return [identity.name for identity in self.identities]

    def __contains__(self, name: object) -> bool:
        return any(identity.name == name for identity in self.identities)

    def __len__(self) -> int:
        return len(self.identities)
