"""
Security tests for MXLIFF MCP server.

Tests protection against:
- XXE (XML External Entity) attacks
- XML bomb / Billion Laughs attacks
- File size limits
- File extension validation
- Target text size limits
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from mcp_server_mxliff.document import MXLIFFDocument
from mcp_server_mxliff.parser import MXLIFFParser
from mcp_server_mxliff.cache import clear_cache, validate_file_extension
from mcp_server_mxliff.constants import (
    ALLOWED_EXTENSIONS,
    MAX_FILE_SIZE,
    MAX_SEGMENT_TEXT_SIZE,
)
from mcp_server_mxliff.server import update_unit
from sample_documents import remove, write_temp


def entity_document(doctype: str, source: str) -> str:
    return f'''<?xml version="1.0" encoding="utf-8"?>
<!DOCTYPE xliff [
{doctype}
]>
<xliff xmlns="urn:oasis:names:tc:xliff:document:1.2" xmlns:m="http://www.memsource.com/mxlf/2.0" version="1.2">
  <file source-language="en" target-language="fr">
    <body>
      <group id="0">
        <trans-unit id="1" m:confirmed="1">
          <source>{source}</source>
          <target>Test</target>
        </trans-unit>
      </group>
    </body>
  </file>
</xliff>'''


VALID_MXLIFF = '''<?xml version="1.0" encoding="utf-8"?>
<xliff xmlns="urn:oasis:names:tc:xliff:document:1.2" xmlns:m="http://www.memsource.com/mxlf/2.0" version="1.2">
  <file source-language="en" target-language="fr">
    <body>
      <group id="0">
        <trans-unit id="1" m:confirmed="1">
          <source>Hello</source>
          <target>Bonjour</target>
          <m:tunit-metadata/>
        </trans-unit>
      </group>
    </body>
  </file>
</xliff>'''


@pytest.fixture
def valid_file():
    path = write_temp(VALID_MXLIFF)
    yield path
    clear_cache()
    remove(path)


def parse_sources(content: str) -> list:
    path = write_temp(content)
    try:
        return [unit.source.plain_text() for unit in MXLIFFParser(path).parse()]
    finally:
        remove(path)


class TestXXEProtection:
    """Tests for XML External Entity (XXE) attack prevention."""

    def test_xxe_file_disclosure_blocked(self):
        """External entities pointing at local files are never expanded."""
        content = entity_document('  <!ENTITY xxe SYSTEM "file:///etc/passwd">', '&xxe;')
        for source in parse_sources(content):
            assert 'root:' not in source

    def test_xxe_network_access_blocked(self):
        """External entities pointing at URLs are never fetched."""
        content = entity_document('  <!ENTITY xxe SYSTEM "http://evil.com/xxe">', 'A&xxe;B')
        # If we get here without hanging, network was not accessed
        assert parse_sources(content) == ['AB']


class TestXMLBombProtection:
    """Tests for XML bomb / Billion Laughs attack prevention."""

    def test_billion_laughs_blocked(self):
        """Exponential entity expansion does not happen."""
        doctype = '\n'.join([
            '  <!ENTITY lol "lol">',
            '  <!ENTITY lol2 "&lol;&lol;&lol;&lol;&lol;&lol;&lol;&lol;&lol;&lol;">',
            '  <!ENTITY lol3 "&lol2;&lol2;&lol2;&lol2;&lol2;&lol2;&lol2;&lol2;&lol2;&lol2;">',
            '  <!ENTITY lol4 "&lol3;&lol3;&lol3;&lol3;&lol3;&lol3;&lol3;&lol3;&lol3;&lol3;">',
            '  <!ENTITY lol5 "&lol4;&lol4;&lol4;&lol4;&lol4;&lol4;&lol4;&lol4;&lol4;&lol4;">',
        ])
        for source in parse_sources(entity_document(doctype, '&lol5;')):
            assert len(source) < 1000, "XML bomb entity expansion was not blocked"

    def test_internal_entity_not_expanded(self):
        content = entity_document('  <!ENTITY test "TEST_ENTITY_VALUE">', '&test;')
        for source in parse_sources(content):
            assert 'TEST_ENTITY_VALUE' not in source


class TestFileSizeLimits:
    """Tests for file size limit enforcement."""

    def test_file_size_limit_constant(self):
        assert MAX_FILE_SIZE == 50 * 1024 * 1024  # 50MB
        assert MXLIFFDocument.MAX_FILE_SIZE == MAX_FILE_SIZE

    def test_large_file_rejected(self, monkeypatch):
        """A file over the limit raises ValueError before parsing."""
        monkeypatch.setattr(MXLIFFDocument, 'MAX_FILE_SIZE', 100)
        path = write_temp(VALID_MXLIFF)
        try:
            with pytest.raises(ValueError, match='too large'):
                MXLIFFDocument(path)
        finally:
            remove(path)

    def test_normal_file_accepted(self, valid_file):
        units = MXLIFFParser(valid_file).parse()
        assert len(units) == 1


class TestFileExtensionValidation:
    """Tests for file extension validation."""

    def test_mxliff_extensions_accepted(self):
        validate_file_extension('/path/to/file.mxliff')
        validate_file_extension('/path/to/file.MXLIFF')
        validate_file_extension('/path/to/FILE.MxLiff')
        validate_file_extension('/path/to/file.mxlf')

    def test_invalid_extensions_rejected(self):
        invalid_extensions = [
            '/path/to/file.xml',
            '/path/to/file.xliff',
            '/path/to/file.sdlxliff',
            '/path/to/file.mxliff.bak',
            '/path/to/file',
            '/path/to/file.mxlif',  # Typo
            '/path/to/file.xlf',
        ]

        for path in invalid_extensions:
            with pytest.raises(ValueError) as exc_info:
                validate_file_extension(path)
            assert 'mxliff' in str(exc_info.value).lower()

    def test_allowed_extensions_constant(self):
        assert ALLOWED_EXTENSIONS == {'.mxliff', '.mxlf'}


class TestTargetTextSizeLimits:
    """Tests for target text size limit enforcement."""

    def test_target_size_limit_constant(self):
        assert MAX_SEGMENT_TEXT_SIZE == 100 * 1024  # 100KB

    def test_large_target_text_rejected(self, valid_file):
        large_text = 'x' * (MAX_SEGMENT_TEXT_SIZE + 1)

        result = update_unit(valid_file, '1', large_text)

        assert result['success'] is False
        assert 'too large' in result['message'].lower()

    def test_normal_target_text_accepted(self, valid_file):
        result = update_unit(valid_file, '1', 'Normal sized text')
        assert result['success'] is True


class TestSave:
    """Saving keeps the file readable and leaves the original untouched."""

    def test_save_to_different_path(self, valid_file):
        output_path = valid_file.replace('.mxliff', '_output.mxliff')
        try:
            document = MXLIFFDocument(valid_file)
            document.save(output_path)

            saved = Path(output_path).read_bytes()
            assert saved.startswith(b'<?xml version="1.0" encoding="utf-8"?>')
            assert MXLIFFParser(output_path).parse()[0].target.plain_text() == 'Bonjour'
        finally:
            Path(output_path).unlink(missing_ok=True)

    def test_no_doctype_written(self):
        content = entity_document('  <!ENTITY test "TEST_ENTITY_VALUE">', 'plain')
        path = write_temp(content)
        output_path = write_temp('')
        try:
            MXLIFFDocument(path).save(output_path)
            assert b'<!ENTITY' not in Path(output_path).read_bytes()
        finally:
            remove(path)
            Path(output_path).unlink(missing_ok=True)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
