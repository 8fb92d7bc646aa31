"""Shared fixtures: key pairs, DIDs and credential subjects."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from veriglob.did import derive_key_did
from veriglob.keys import generate_ed25519_keypair
from veriglob.subjects import (
    EducationSubject,
    EmploymentSubject,
    IdentitySubject,
    MembershipSubject,
)


@dataclass
class Party:
    did: str
    public_key: bytes
    private_key: bytes


def make_party() -> Party:
    public_key, private_key = generate_ed25519_keypair()
    return Party(did=derive_key_did(public_key), public_key=public_key, private_key=private_key)


@pytest.fixture
def issuer() -> Party:
    return make_party()


@pytest.fixture
def holder() -> Party:
    return make_party()


@pytest.fixture
def verifier() -> Party:
    return make_party()


@pytest.fixture
def identity_subject(holder: Party) -> IdentitySubject:
    return IdentitySubject(
        id=holder.did,
        given_name="Ada",
        family_name="Lovelace",
        date_of_birth="1815-12-10",
        nationality="GB",
    )


@pytest.fixture
def all_subjects(holder: Party) -> list:
    return [
        IdentitySubject(
            id=holder.did,
            given_name="Ada",
            family_name="Lovelace",
            date_of_birth="1815-12-10",
        ),
        EducationSubject(
            id=holder.did,
            institution_name="University of London",
            degree="BSc",
            field_of_study="Mathematics",
            credits_earned=180,
        ),
        EmploymentSubject(
            id=holder.did,
            employer_name="Analytical Engines Ltd",
            job_title="Programmer",
            start_date="1842-01-01",
            current_employee=True,
        ),
        MembershipSubject(
            id=holder.did,
            organization_name="Royal Society",
            start_date="1840-06-01",
            roles=("fellow", "reviewer"),
            active_member=True,
        ),
    ]
