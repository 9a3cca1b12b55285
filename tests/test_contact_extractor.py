import pytest

from app.services.contact_extractor import (
    build_sections,
    clean_and_validate_phone,
    extract_contact_info,
    extract_email,
    extract_name,
    extract_phone,
    find_emails,
    find_phones,
    is_valid_email,
)

FILLER = "experience with python and sql"


class TestSections:
    """Test cases for text windows"""

    def test_windows_sizes(self):
        text = "\n".join(f"line {i}" for i in range(30))
        sections = build_sections(text)

        assert len(sections.header.split("\n")) == 10
        assert len(sections.contact.split("\n")) == 20
        assert len(sections.full.split("\n")) == 30

    def test_whitespace_collapsed_and_lines_kept(self):
        sections = build_sections("Jane   Doe\r\n\r\n\tData\t Analyst  \n")

        assert sections.full == "Jane Doe\nData Analyst"


class TestNameExtraction:
    """Test cases for name extraction"""

    def test_name_at_top(self):
        text = "John Michael Smith\nSoftware Engineer\njohn@example.com"
        assert extract_name(text) == "John Michael Smith"

    def test_name_does_not_run_into_next_line(self):
        text = "John Smith\nSoftware Engineer"
        assert extract_name(text) == "John Smith"

    def test_name_with_credentials(self):
        assert extract_name("Jane Doe, PhD\nResearch Scientist") == "Jane Doe"

    def test_name_after_heading(self):
        text = "CURRICULUM VITAE\nJane Doe\ndata analyst"
        assert extract_name(text) == "Jane Doe"

    def test_name_found_in_full_text(self):
        lines = [FILLER] * 12 + ["Priya Sharma", FILLER]
        assert extract_name("\n".join(lines)) == "Priya Sharma"

    def test_no_name(self):
        assert extract_name("john smith\n12345") == ""
        assert extract_name("") == ""


class TestEmailExtraction:
    """Test cases for email extraction"""

    def test_labelled_email_wins_over_invalid_one(self):
        text = "Jane Doe\nEmail: jane@co.com\nOld address jane.doe@old"
        assert extract_email(text) == "jane@co.com"

    def test_email_lower_cased(self):
        assert extract_email("Jane Doe\nJANE.DOE@Example.COM") == "jane.doe@example.com"

    def test_email_found_outside_contact_window(self):
        lines = [FILLER] * 25 + ["reach me at x.y@mail.example.org"]
        assert extract_email("\n".join(lines)) == "x.y@mail.example.org"

    def test_no_email(self):
        assert extract_email("Jane Doe\nno address here") == ""

    @pytest.mark.parametrize("email,valid", [
        ("a@b.co", True),
        ("jane..doe@x.com", False),
        (".jane@x.com", False),
        ("jane@x.com.", False),
        ("jane@.com", False),
        ("jane.@x.com", False),
        ("jane@com", False),
        ("a@b.", False),
        ("ja ne@x.com", False),
    ])
    def test_is_valid_email(self, email, valid):
        assert is_valid_email(email) is valid


class TestPhoneValidation:
    """Test cases for phone cleaning and normalisation"""

    @pytest.mark.parametrize("raw", ["9876543210", "987-654-3210", "(987) 654 3210", "987.654.3210"])
    def test_ten_digits_get_default_country_code(self, raw):
        assert clean_and_validate_phone(raw) == "+919876543210"

    @pytest.mark.parametrize("raw", ["Mobile 9876543210", "PHONE: 9876543210", "Cell 9876543210", "tel 14155552671"])
    def test_label_words_rejected(self, raw):
        assert clean_and_validate_phone(raw) == ""

    def test_international_number_kept(self):
        assert clean_and_validate_phone("+1 415 555 2671") == "+14155552671"

    def test_long_number_without_plus_gets_one(self):
        assert clean_and_validate_phone("14155552671") == "+14155552671"

    @pytest.mark.parametrize("raw", ["12345", "1234567890123456", "+91+9876543210", ""])
    def test_invalid_numbers(self, raw):
        assert clean_and_validate_phone(raw) == ""


class TestPhoneExtraction:
    """Test cases for phone extraction from text"""

    def test_dashed_number(self):
        assert extract_phone("Jane Doe\nPhone: 987-654-3210") == "+919876543210"

    def test_labelled_number(self):
        assert extract_phone("Jane Doe\nMobile: 9876543210") == "+919876543210"

    def test_parenthesised_international(self):
        assert extract_phone("Jane Doe\n+1 (415) 555-2671") == "+14155552671"

    def test_no_phone(self):
        assert extract_phone("Jane Doe\nGraduated 2015-2019") == ""


class TestContactInfo:
    """End-to-end contact extraction"""

    def test_extract_contact_info(self):
        text = (
            "John Michael Smith\n"
            "Software Engineer\n"
            "Email: John.Smith@Example.com | Mobile: 9876543210\n"
            "Skills: Python, AWS"
        )
        info = extract_contact_info(text)

        assert info.name == "John Michael Smith"
        assert info.email == "john.smith@example.com"
        assert info.phone == "+919876543210"

    def test_empty_text(self):
        info = extract_contact_info("")
        assert (info.name, info.email, info.phone) == ("", "", "")


class TestTierOrder:
    """Test cases for window fallthrough and ordering"""

    def test_email_from_contact_window_beats_later_text(self):
        lines = [FILLER] * 14 + ["jane@contact.com"] + [FILLER] * 9 + ["old@later.com"]
        sections = build_sections("\n".join(lines))

        assert find_emails(sections) == ["jane@contact.com"]

    def test_emails_deduplicated_case_insensitively(self):
        sections = build_sections("Jane Doe\nJANE@x.com\njane@x.com")

        assert find_emails(sections) == ["jane@x.com"]

    def test_phone_from_contact_window_beats_later_text(self):
        lines = [FILLER] * 14 + ["9876543210"] + [FILLER] * 9 + ["9123456789"]
        sections = build_sections("\n".join(lines))

        assert find_phones(sections) == ["+919876543210"]

    def test_phone_pattern_order_before_window_order(self):
        lines = ["Jane Doe", "Phone: 987-654-3210"] + [FILLER] * 10 + ["9123456789"]
        text = "\n".join(lines)

        assert find_phones(build_sections(text)) == ["+919123456789", "+919876543210"]
        assert extract_phone(text) == "+919123456789"
