# Path: certverify/tests/test_similarity.py
"""Similarity, digest and rounding tools."""

from dataclasses import replace

from certverify.engine.tools import (
    canonical_payload,
    clamp_confidence,
    compute_digest,
    edit_distance,
    normalize_text,
    round_half_up,
    similarity,
)
from certverify.tests.fixtures import create_record

SAMPLES = ['', 'a', 'rahul kumar singh', 'rahul kumr singh', 'b.sc cs', 'bsc computer science', 'xyz']


class TestSimilarity:

    def test_similarity_bounds_and_symmetry(self):
        for a in SAMPLES:
            assert similarity(a, a) == 1.0
            for b in SAMPLES:
                value = similarity(a, b)
                assert 0.0 <= value <= 1.0
                assert value == similarity(b, a)

    def test_similarity_of_empty_strings_is_one(self):
        assert similarity('', '') == 1.0
        assert similarity('', 'abc') == 0.0

    def test_similarity_single_typo(self):
        # one deletion in an 11 character string
        assert abs(similarity('rahul kumar', 'rahul kumr') - (1 - 1 / 11)) < 1e-9

    def test_similarity_is_case_sensitive(self):
        assert abs(similarity('Rahul', 'rahul') - 0.8) < 1e-9

    def test_edit_distance_known_values(self):
        assert edit_distance('kitten', 'sitting') == 3
        assert edit_distance('', 'abc') == 3
        assert edit_distance('abc', 'abc') == 0

    def test_normalize_text(self):
        assert normalize_text('  Rahul   KUMAR\tSingh ') == 'rahul kumar singh'
        assert normalize_text(None) == ''


class TestDigest:

    def test_digest_is_idempotent(self):
        record = create_record()
        assert compute_digest(record) == compute_digest(record)
        assert len(compute_digest(record)) == 64

    def test_digest_ignores_fields_outside_the_tuple(self):
        record = create_record()
        changed = replace(record, cgpa=9.9, ledger_digest='abc', roll_number='X1')
        assert compute_digest(record) == compute_digest(changed)

    def test_digest_changes_with_identity_fields(self):
        record = create_record()
        assert compute_digest(record) != compute_digest(replace(record, student_name='Rahul Singh'))
        assert compute_digest(record) != compute_digest(replace(record, passing_year=2022))

    def test_canonical_payload_field_order(self):
        payload = canonical_payload(create_record())
        assert payload.startswith('{"studentName":"Rahul Kumar Singh","certificateNumber":')
        assert payload.endswith('"dateOfIssue":"2023-07-15"}')


class TestRounding:

    def test_round_half_up(self):
        assert round_half_up(85.5) == 86
        assert round_half_up(84.5) == 85
        assert round_half_up(87.6) == 88
        assert round_half_up(93.75) == 94

    def test_clamp_confidence(self):
        assert clamp_confidence(-3) == 0
        assert clamp_confidence(104.2) == 100
        assert clamp_confidence(50.5) == 51
