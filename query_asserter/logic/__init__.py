from query_asserter.logic.entity_registry import EntityRegistry, attribute_asserter
from query_asserter.logic.expected_data import ExpectedData, InMemoryExpectedData
from query_asserter.logic.include_asserter import ExpectedInclude, IncludeQueryResultAsserter
from query_asserter.logic.query_asserter import QueryAsserter
from query_asserter.logic.result_comparison import assert_results, assert_results_nullable
from query_asserter.logic.set_extractor import DefaultSetExtractor, SetExtractor

__all__ = [
    "EntityRegistry",
    "attribute_asserter",
    "ExpectedData",
    "InMemoryExpectedData",
    "ExpectedInclude",
    "IncludeQueryResultAsserter",
    "QueryAsserter",
    "assert_results",
    "assert_results_nullable",
    "SetExtractor",
    "DefaultSetExtractor",
]
