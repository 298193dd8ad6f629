"""
Phone normalization tests.

Run with: python -m pytest tests/test_phone_normalization.py -v
"""

import pytest

from utils import normalize_phone, clean_phone_input, generate_patient_id


class TestCleanPhoneInput:

    def test_strips_formatting(self):
        assert clean_phone_input('(555) 111-2222') == '5551112222'

    def test_keeps_leading_plus_only(self):
        assert clean_phone_input('+1 555+111') == '+1555111'

    def test_numeric_cell(self):
        assert clean_phone_input(5551112222) == '5551112222'

    def test_folds_other_script_digits(self):
        assert clean_phone_input('\uff15\uff15\uff15') == '555'
        assert clean_phone_input('+\U0001d7d3\U0001d7d3\U0001d7d3') == '+555'
        assert clean_phone_input('\u0665\u0665\u0665') == '555'

    def test_drops_superscripts(self):
        assert clean_phone_input('\u00b2\u00b3') == ''

    def test_no_digits(self):
        assert clean_phone_input('not-a-phone') == ''
        assert clean_phone_input(None) == ''


class TestNormalizePhone:

    @pytest.mark.parametrize('raw', [
        '555-111-2222',
        '(555) 111-2222',
        '555.111.2222',
        '1-555-111-2222',
        '+1 555 111 2222',
        5551112222,
    ])
    def test_us_numbers(self, raw):
        assert normalize_phone(raw) == '+15551112222'

    def test_international_number(self):
        assert normalize_phone('+44 20 7946 0958') == '+442079460958'

    def test_default_region(self):
        assert normalize_phone('020 7946 0958', default_region='GB') == '+442079460958'

    def test_loose_e164_fallback(self):
        # Unknown country code, but shaped like E.164
        assert normalize_phone('+999123') == '+999123'

    @pytest.mark.parametrize('raw', [
        '',
        '   ',
        None,
        'not-a-phone',
        'abc',
        '+',
        '12',
        '+1234567890123456789',
    ])
    def test_rejected(self, raw):
        assert normalize_phone(raw) is None

    @pytest.mark.parametrize('raw', [
        '', 'letters only', '()--..', '+', '++', '0', '+0', '​5551112222',
        '555-111-2222 ext 5', 12.5, object(),
    ])
    def test_never_raises(self, raw):
        result = normalize_phone(raw)
        assert result is None or result.startswith('+')

    @pytest.mark.parametrize('canonical', [
        '+15551112222',
        '+442079460958',
        '+999123',
        '+1234',
    ])
    def test_idempotent(self, canonical):
        once = normalize_phone(canonical)
        assert once is not None
        assert normalize_phone(once) == once


class TestGeneratePatientId:

    def test_shape(self):
        for _ in range(50):
            patient_id = generate_patient_id()
            assert patient_id.startswith('PT-')
            assert len(patient_id) == 7
            assert 1000 <= int(patient_id[3:]) <= 9999


class TestNonAsciiDigits:

    def test_math_digits_match_ascii_number(self):
        assert normalize_phone('+\U0001d7d3\U0001d7d3\U0001d7d3') == normalize_phone('+555') == '+555'

    @pytest.mark.parametrize('raw', [
        '５５５-１１１-２２２２',
        '٥٥٥١١١٢٢٢٢',
    ])
    def test_other_scripts_normalize_to_us_number(self, raw):
        assert normalize_phone(raw) == '+15551112222'

    @pytest.mark.parametrize('raw', [
        '+\U0001d7d3\U0001d7d3\U0001d7d3',
        '+９９９１２３',
        '²³¹',
    ])
    def test_result_is_ascii(self, raw):
        result = normalize_phone(raw)
        assert result is None or (result[0] == '+' and result[1:].isascii() and result[1:].isdigit())
