from dataclasses import replace
from datetime import date

import pytest

from veriage_core.credentials import Credential, CredentialService
from veriage_core.errors import ThresholdNotMet
from veriage_core.flow import AgeVerificationFlow, proof_id
from veriage_core.ledger import AttestationLedger
from veriage_core.proof import ProofService

HOUR_MS = 60 * 60 * 1000


@pytest.fixture
def flow(store, clock):
    return AgeVerificationFlow(
        ProofService(clock=clock),
        CredentialService(store, clock=clock),
        AttestationLedger(store, clock=clock),
    )


def test_enroll_and_verify(flow):
    enrollment = flow.enroll(date(2000, 1, 1), 18)
    cred = Credential.from_json(enrollment.credential)

    assert cred.subject_id == enrollment.did
    assert cred.claims == {"ageVerified": "18+", "proofType": "ZKP", "proofId": enrollment.proof[:20]}
    assert flow.ledger.lookup(enrollment.tx_ref).subject_proof_id == cred.id
    assert flow.verify(enrollment, 18)
    assert not flow.verify(enrollment, 21)


def test_enroll_refused_below_threshold(flow, store):
    with pytest.raises(ThresholdNotMet):
        flow.enroll(date(2010, 1, 1), 18)
    assert store.did_documents == {} and store.credentials == {} and store.attestations == {}


def test_revoked_anchor_fails(flow):
    enrollment = flow.enroll(date(2000, 1, 1), 18)
    flow.ledger.revoke(enrollment.tx_ref)
    assert not flow.verify(enrollment, 18)


def test_stale_proof_fails(flow, clock):
    enrollment = flow.enroll(date(2000, 1, 1), 18)
    clock.advance(25 * HOUR_MS)
    assert not flow.verify(enrollment, 18)


def test_mismatched_parts_fail(flow):
    a = flow.enroll(date(2000, 1, 1), 18)
    b = flow.enroll(date(1990, 1, 1), 18)

    assert not flow.verify(replace(a, proof=b.proof), 18)
    assert not flow.verify(replace(a, tx_ref=b.tx_ref), 18)
    assert not flow.verify(replace(a, did=b.did), 18)
    assert not flow.verify(replace(a, tx_ref="tx_unknown"), 18)
    assert not flow.verify(replace(a, credential="garbage"), 18)


def test_proof_id_distinguishes_same_threshold_proofs(flow):
    a = flow.enroll(date(2000, 1, 1), 18)
    b = flow.enroll(date(2000, 1, 1), 18)
    id_a = Credential.from_json(a.credential).claims["proofId"]
    id_b = Credential.from_json(b.credential).claims["proofId"]
    assert id_a == proof_id(a.proof)
    assert id_a != id_b
    assert not flow.verify(replace(a, proof=b.proof), 18)
    assert flow.verify(a, 18) and flow.verify(b, 18)


def test_verify_non_integer_threshold_fails_closed(flow):
    enrollment = flow.enroll(date(2000, 1, 1), 18)
    assert flow.verify(enrollment, None) is False
