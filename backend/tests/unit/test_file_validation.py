"""Unit tests for file validation utilities"""

import re

import pytest

from domain.documents.validation import (
    Classification,
    DEFAULT_MAX_FILE_SIZE,
    PLACEHOLDER_FILENAME,
    SUPPORTED_MIME_TYPES,
    classify_size,
    classify_type,
    file_too_large_message,
    format_size_limit,
    generate_storage_name,
    invalid_type_message,
    normalize_mime_type,
    sanitize_filename,
    too_many_files_message,
)


class TestTypeClassification:
    """Test the media type allow-list"""

    def test_supported_mime_types_constant(self):
        """Exactly PDF, the Excel types and the PowerPoint types are allowed"""
        assert SUPPORTED_MIME_TYPES == {
            'application/pdf',
            'application/vnd.ms-excel',
            'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
            'application/vnd.ms-powerpoint',
            'application/vnd.openxmlformats-officedocument.presentationml.presentation',
        }

    @pytest.mark.parametrize("mime_type", sorted(SUPPORTED_MIME_TYPES))
    def test_supported_types_accepted(self, mime_type):
        assert classify_type(mime_type) is Classification.ACCEPTED

    @pytest.mark.parametrize("mime_type", [
        'text/plain',
        'text/csv',
        'image/png',
        'application/zip',
        'application/x-msdownload',
        'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
        '',
        None,
    ])
    def test_unsupported_types_rejected(self, mime_type):
        assert classify_type(mime_type) is Classification.REJECTED

    def test_parameters_and_case_are_ignored(self):
        """Declared types are compared without parameters, case-insensitively"""
        assert classify_type('Application/PDF; charset=binary') is Classification.ACCEPTED
        assert normalize_mime_type(' application/PDF ;x=y') == 'application/pdf'


class TestSizeClassification:
    """Test the per-file size ceiling"""

    def test_file_at_limit_accepted(self):
        assert classify_size(DEFAULT_MAX_FILE_SIZE) is Classification.ACCEPTED

    def test_file_over_limit_rejected(self):
        assert classify_size(DEFAULT_MAX_FILE_SIZE + 1) is Classification.REJECTED

    def test_empty_file_accepted(self):
        """Only the ceiling applies; empty payloads are not a size error"""
        assert classify_size(0) is Classification.ACCEPTED

    def test_custom_limit(self):
        assert classify_size(11, max_size=10) is Classification.REJECTED
        assert classify_size(10, max_size=10) is Classification.ACCEPTED


class TestMessages:
    """Test user-facing validation messages"""

    def test_format_size_limit(self):
        assert format_size_limit(50 * 1024 * 1024) == '50MB'
        assert format_size_limit(1024) == '1KB'
        assert format_size_limit(1000) == '1000 bytes'

    def test_messages_carry_ordinal(self):
        assert too_many_files_message(11, 10) == "File 11: Too many files. Maximum 10 files allowed per upload"
        assert invalid_type_message(2) == (
            "File 2: Invalid file type. Only PDF, Excel, and PowerPoint files are allowed."
        )
        assert file_too_large_message(3, 50 * 1024 * 1024) == "File 3: File too large. Maximum size is 50MB."


class TestFilenameSanitization:
    """Test filename sanitization"""

    def test_plain_name_unchanged(self):
        assert sanitize_filename('report.pdf') == 'report.pdf'

    def test_path_traversal_removed(self):
        assert sanitize_filename('../../etc/passwd') == 'passwd'
        assert sanitize_filename('..\\..\\windows\\system32\\evil.pdf') == 'evil.pdf'

    def test_spaces_and_specials_replaced(self):
        assert sanitize_filename('Q3 report (final).pdf') == 'Q3_report_final_.pdf'

    def test_header_breaking_characters_removed(self):
        """Quotes, semicolons and line breaks never survive"""
        result = sanitize_filename('a"b;c\r\nd.pdf')
        assert '"' not in result
        assert ';' not in result
        assert '\r' not in result and '\n' not in result

    def test_non_ascii_replaced(self):
        result = sanitize_filename('Übersicht €.xlsx')
        assert result.isascii()
        assert result.endswith('.xlsx')

    @pytest.mark.parametrize("name", ['', None, '..', '.', '///', '   ', '\\'])
    def test_never_empty(self, name):
        assert sanitize_filename(name) == PLACEHOLDER_FILENAME

    def test_hidden_file_dot_stripped(self):
        assert sanitize_filename('.bashrc') == 'bashrc'

    def test_long_name_truncated_keeping_extension(self):
        result = sanitize_filename('a' * 300 + '.pdf')
        assert len(result) == 255
        assert result.endswith('.pdf')

    def test_deterministic(self):
        assert sanitize_filename('My File (1).pdf') == sanitize_filename('My File (1).pdf')


class TestStorageNames:
    """Test collision-resistant storage name generation"""

    def test_format(self):
        name = generate_storage_name('report.PDF')
        assert re.match(r'^\d{13}_[0-9a-f]{16}\.pdf$', name)

    def test_same_original_name_never_collides(self):
        names = {generate_storage_name('report.pdf') for _ in range(200)}
        assert len(names) == 200

    def test_suspicious_extension_dropped(self):
        assert '.' not in generate_storage_name('archive.tar_gz_really_long_ext')
        assert '.' not in generate_storage_name('noext')
