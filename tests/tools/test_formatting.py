from __future__ import annotations

from megasearch_mcp.tools.formatting import format_search_result
from megasearch_mcp.tools.search_models import SearchResult


def _full_result() -> SearchResult:
    return SearchResult.model_validate(
        {
            "query": "quantum computing",
            "answer": "Quantum computers use qubits.",
            "sources": [
                {"index": 1, "title": "A", "url": "http://x", "snippet": "s", "provider": "brave"},
                {"index": 2, "title": "B", "url": "http://y", "snippet": "t"},
            ],
            "metadata": {
                "iterations": 2,
                "providers_used": ["brave", "tavily"],
                "used_paid_apis": True,
                "gaps_identified": ["pricing", "timeline"],
                "refined_queries": ["quantum hardware 2025", "qubit error rates", "ibm roadmap"],
                "total_time_ms": 41250,
            },
            "usage": {"credits_charged": 3, "credits_remaining": 97.5, "plan": "pro"},
        }
    )


def test_minimal_result_renders_heading_and_answer_only() -> None:
    result = SearchResult(query="rust", answer="A systems language.")

    text = format_search_result(result)

    assert text == "# Answer to: rust\n\nA systems language.\n"
    assert "##" not in text


def test_sources_listed_with_index_title_url_and_provider() -> None:
    text = format_search_result(_full_result())

    assert text.startswith("# Answer to: quantum computing\n\nQuantum computers use qubits.\n")
    assert "## Sources" in text
    assert "[1] **A**\n    URL: http://x\n    Provider: brave\n" in text
    assert "[2] **B**\n    URL: http://y\n\n" in text


def test_metadata_section() -> None:
    text = format_search_result(_full_result())

    assert "## Search Metadata\n- Iterations: 2\n- Providers: brave, tavily\n" in text
    assert "- Total time: 41250ms" in text
    assert "- Used paid APIs: true" in text
    assert "- Gaps identified: pricing, timeline" in text
    assert "- Query refinements: 3" in text


def test_metadata_optional_lists_omitted_when_empty() -> None:
    result = SearchResult.model_validate(
        {
            "query": "q",
            "answer": "a",
            "sources": [],
            "metadata": {
                "iterations": 1,
                "providers_used": ["brave"],
                "used_paid_apis": False,
                "gaps_identified": [],
                "total_time_ms": 900,
            },
        }
    )

    text = format_search_result(result)

    assert "## Sources" not in text
    assert "- Used paid APIs: false" in text
    assert "Gaps identified" not in text
    assert "Query refinements" not in text
    assert "## Usage" not in text


def test_usage_section() -> None:
    text = format_search_result(_full_result())

    assert text.endswith("\n\n## Usage\n- Credits charged: 3\n- Credits remaining: 97.5\n- Plan: pro")


def test_formatting_is_deterministic() -> None:
    result = _full_result()

    assert format_search_result(result) == format_search_result(result)


def test_null_sources_treated_as_empty() -> None:
    result = SearchResult.model_validate({"query": "q", "answer": "a", "sources": None})

    assert result.sources == ()
    assert "## Sources" not in format_search_result(result)


def test_whole_float_numbers_render_without_decimal_point() -> None:
    result = SearchResult.model_validate(
        {
            "query": "q",
            "answer": "a",
            "metadata": {
                "iterations": 1,
                "providers_used": ["brave"],
                "used_paid_apis": False,
                "total_time_ms": 41250.0,
            },
            "usage": {"credits_charged": 3.0, "credits_remaining": 96.5, "plan": "free"},
        }
    )

    text = format_search_result(result)

    assert "- Total time: 41250ms" in text
    assert "- Credits charged: 3\n" in text
    assert "- Credits remaining: 96.5\n" in text
