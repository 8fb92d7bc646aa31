# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Credential subjects: a closed, tagged set of four variants.

Each variant is a frozen dataclass carrying the subject DID in ``id`` plus
the attested fields for its credential type. The tag lives on the class as
``credential_type`` and is what the wire format's ``type`` array carries.

On the wire, subjects are camelCase JSON objects. Fields defaulting to
``None`` are optional and omitted when unset; everything else is always
written.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Union

from .types import MalformedTokenError


class CredentialType(str, Enum):
    """Type tag of a credential subject."""

    IDENTITY = "IdentityCredential"
    EDUCATION = "EducationCredential"
    EMPLOYMENT = "EmploymentCredential"
    MEMBERSHIP = "MembershipCredential"


@dataclass(frozen=True)
class IdentitySubject:
    """KYC / identity verification claims."""

    credential_type: ClassVar[CredentialType] = CredentialType.IDENTITY

    id: str
    given_name: str
    family_name: str
    date_of_birth: str
    nationality: str | None = None
    document_type: str | None = None
    document_id: str | None = None
    place_of_birth: str | None = None
    gender: str | None = None
    address: str | None = None
    verified_at: str | None = None
    verified_level: str | None = None


@dataclass(frozen=True)
class EducationSubject:
    """Degree, certificate or course completion claims."""

    credential_type: ClassVar[CredentialType] = CredentialType.EDUCATION

    id: str
    institution_name: str
    institution_did: str | None = None
    degree: str | None = None
    field_of_study: str | None = None
    graduation_date: str | None = None
    certificate_name: str | None = None
    course_name: str | None = None
    completion_date: str | None = None
    grade: str | None = None
    credits_earned: int | None = None


@dataclass(frozen=True)
class EmploymentSubject:
    """Employment claims."""

    credential_type: ClassVar[CredentialType] = CredentialType.EMPLOYMENT

    id: str
    employer_name: str
    job_title: str
    start_date: str
    employer_did: str | None = None
    department: str | None = None
    end_date: str | None = None
    employment_type: str | None = None
    work_location: str | None = None
    current_employee: bool = False


@dataclass(frozen=True)
class MembershipSubject:
    """Organization membership claims."""

    credential_type: ClassVar[CredentialType] = CredentialType.MEMBERSHIP

    id: str
    organization_name: str
    start_date: str
    organization_did: str | None = None
    membership_id: str | None = None
    membership_type: str | None = None
    role: str | None = None
    roles: tuple[str, ...] | None = None
    access_level: str | None = None
    expiration_date: str | None = None
    active_member: bool = False


CredentialSubject = Union[
    IdentitySubject, EducationSubject, EmploymentSubject, MembershipSubject
]

_SUBJECT_CLASSES: dict[CredentialType, type] = {
    CredentialType.IDENTITY: IdentitySubject,
    CredentialType.EDUCATION: EducationSubject,
    CredentialType.EMPLOYMENT: EmploymentSubject,
    CredentialType.MEMBERSHIP: MembershipSubject,
}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def subject_to_dict(subject: CredentialSubject) -> dict[str, Any]:
    """Serialize a subject to its camelCase wire form."""
    if type(subject) not in _SUBJECT_CLASSES.values():
        raise TypeError(f"not a credential subject: {type(subject).__name__}")

    data: dict[str, Any] = {}
    for f in dataclasses.fields(subject):
        value = getattr(subject, f.name)
        if value is None:
            continue
        if isinstance(value, tuple):
            value = list(value)
        data[_camel(f.name)] = value
    return data


def parse_subject(credential_type: CredentialType | str, raw: object) -> CredentialSubject:
    """Decode an untyped ``credentialSubject`` object into its variant.

    Parameters
    ----------
    credential_type:
        The discriminant, read from the credential's ``type`` array.
    raw:
        The JSON-decoded ``credentialSubject`` value.

    Raises
    ------
    MalformedTokenError
        Unknown tag, non-object subject, or a missing required field.
    """
    try:
        tag = CredentialType(credential_type)
    except ValueError as exc:
        raise MalformedTokenError(
            f"parse_subject: unknown credential type {credential_type!r}"
        ) from exc
    if not isinstance(raw, dict):
        raise MalformedTokenError(
            f"parse_subject: credentialSubject must be an object, got {type(raw).__name__}"
        )

    cls = _SUBJECT_CLASSES[tag]
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        key = _camel(f.name)
        if key in raw:
            value = raw[key]
            kwargs[f.name] = tuple(value) if isinstance(value, list) else value
        elif f.default is dataclasses.MISSING:
            raise MalformedTokenError(
                f"parse_subject: {tag.value} is missing required field {key!r}"
            )
    return cls(**kwargs)


def credential_type_from_types(types: list[str]) -> CredentialType:
    """Return the subject tag found in a credential ``type`` array."""
    for value in types:
        try:
            return CredentialType(value)
        except ValueError:
            continue
    raise MalformedTokenError(
        f"credential type array carries no known subject type: {types!r}"
    )
