"""Unit tests for access code generation."""

from loomero.access.codes import ACCESS_CODE_LENGTH, generate_access_code, normalize_access_code


class TestGenerateAccessCode:
    def test_six_digits(self):
        for _ in range(200):
            code = generate_access_code()
            assert len(code) == ACCESS_CODE_LENGTH
            assert code.isdigit()
            assert 100_000 <= int(code) <= 999_999

    def test_codes_vary(self):
        assert len({generate_access_code() for _ in range(50)}) > 1


class TestNormalizeAccessCode:
    def test_strips_whitespace(self):
        assert normalize_access_code("  123456\n") == "123456"

    def test_removes_inner_spaces(self):
        assert normalize_access_code("123 456") == "123456"
