"""
Pytest configuration and shared fixtures.

The Notion API is never contacted: FakeNotionClient serves pages from memory
in the same shape as the database query endpoint.
"""
import pytest


def make_page(page_id, qtype="MCQ", question="?", options="", correct="", lectures=()):
    """Build a Notion page dict with the quiz database's properties."""
    return {
        "object": "page",
        "id": page_id,
        "properties": {
            "Type": {"type": "select", "select": {"name": qtype}},
            "Question": {
                "type": "title",
                "title": [{"plain_text": question}],
            },
            "Options": {
                "type": "rich_text",
                "rich_text": [{"plain_text": options}] if options else [],
            },
            "Correct answer": {
                "type": "rich_text",
                "rich_text": [{"plain_text": correct}] if correct else [],
            },
            "Lecture": {
                "type": "relation",
                "relation": [{"id": lid} for lid in lectures],
            },
        },
    }


def _matches(page, query_filter):
    if not query_filter:
        return True
    clauses = query_filter.get("or", [query_filter])
    related = {r["id"] for r in page["properties"]["Lecture"]["relation"]}
    return any(c["relation"]["contains"] in related for c in clauses)


class FakeNotionClient:
    """Serves pages in batches of `page_size`, honoring Lecture relation filters."""

    def __init__(self, pages, fail_on_call=None):
        self.pages = pages
        self.calls = []
        self.fail_on_call = fail_on_call

    async def request(self, path, method, query=None, body=None, auth=None):
        body = dict(body or {})
        self.calls.append({"path": path, "method": method, "body": body})
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise RuntimeError("Notion is unavailable")

        matching = [p for p in self.pages if _matches(p, body.get("filter"))]
        start = int(body.get("start_cursor") or 0)
        size = body.get("page_size", 100)
        batch = matching[start:start + size]
        end = start + len(batch)
        has_more = end < len(matching)
        return {
            "object": "list",
            "results": batch,
            "has_more": has_more,
            "next_cursor": str(end) if has_more else None,
        }


@pytest.fixture
def quiz_pages():
    return [
        make_page("q1", "MCQ", "Capital of France?", "London\nParis\nRome", "Paris", ["L1"]),
        make_page("q2", "Short answer", "Largest planet?", "", "Jupiter", ["L2"]),
        make_page("q3", "MCQ", "2 + 2?", "3<br>4<BR>5", "4", ["L3"]),
        make_page("q4", "Short answer", "Author of Hamlet?", "", "Shakespeare, William Shakespeare", ["L1", "L3"]),
        make_page("q5", "MCQ", "Boiling point of water?", "90\n100\n110", "100", []),
    ]


@pytest.fixture
def fake_notion(quiz_pages):
    return FakeNotionClient(quiz_pages)


@pytest.fixture
def page_factory():
    return make_page


@pytest.fixture
def notion_factory():
    return FakeNotionClient
