"""Codecs for Apple and Android localization files."""

from .android_writer import AndroidResources, AndroidWriter, generate_all_android_xml
from .plural_rules import from_android_quantities, to_android_quantities
from .strings_parser import ParsedStrings, StringsParser, parse_strings_dict, parse_strings_file
from .strings_writer import (
    StringsWriter,
    generate_all_strings_files,
    serialize_strings_dict,
    serialize_strings_file,
)
from .xcstrings_parser import XCStringsParser, parse_string_catalog
from .xcstrings_writer import XCStringsWriter, generate_ios_string_catalog

__all__ = [
    "AndroidResources",
    "AndroidWriter",
    "ParsedStrings",
    "StringsParser",
    "StringsWriter",
    "XCStringsParser",
    "XCStringsWriter",
    "from_android_quantities",
    "generate_all_android_xml",
    "generate_all_strings_files",
    "generate_ios_string_catalog",
    "parse_string_catalog",
    "parse_strings_dict",
    "parse_strings_file",
    "serialize_strings_dict",
    "serialize_strings_file",
    "to_android_quantities",
]
