"""End-to-end tests of per-document documentation."""

from __future__ import annotations

from conftest import FakeBackend, split_cursor
from eldoc_lsp.eldoc import DocumentEldoc
from eldoc_lsp.models import Candidate
from eldoc_lsp.settings import EldocSettings

SOURCE = """\
/** Add two numbers. */
int add(int x, int y);

/** Pick the larger value. */
#define MAX(a, b) ((a) > (b) ? (a) : (b))

int main() {
    return add(1,$ 2);
}
"""


def _document(source: str = SOURCE, **kwargs) -> tuple[DocumentEldoc, int]:
    text, offset = split_cursor(source)
    return DocumentEldoc(text, **kwargs), offset


class TestDocumentation:
    """Test documentation with the bundled backend."""

    def test_call(self):
        """Test documentation of the enclosing call."""
        document, offset = _document()
        assert document.documentation(offset) == "add (int x, **int y**) => int; Add two numbers."

    def test_symbol(self):
        """Test documentation of the symbol under the cursor."""
        source = SOURCE.replace("return add", "return a$dd").replace(",$", ",")
        document, offset = _document(source)
        assert document.documentation(offset) == "add => int; Add two numbers."

    def test_macro_call(self):
        """Test documentation of a function-like macro."""
        source = SOURCE.replace("add(1,$ 2)", "MAX(1,$ 2) + add(1, 2)")
        document, offset = _document(source, settings=EldocSettings())
        assert document.documentation(offset) == "MAX (a, **b**); Pick the larger value."

    def test_unknown_symbol_falls_back_to_call(self):
        """Test that an undocumented argument shows its call instead."""
        document, offset = _document(SOURCE.replace("add(1,$ 2)", "add(cou$nt, 2)"))
        assert document.documentation(offset) == "add (**int x**, int y) => int; Add two numbers."

    def test_comment_has_no_documentation(self):
        """Test that a cursor in a comment shows nothing."""
        source = SOURCE.replace("/** Add two", "/** A$dd two").replace(",$", ",")
        document, offset = _document(source)
        assert document.documentation(offset) is None

    def test_comment_being_typed(self):
        """Test that a doc comment without its closer still shows nothing."""
        source = "int add(int x, int y);\n/** see add(1,$ 2) for details"
        document, offset = _document(source)
        assert document.documentation(offset) is None
        assert document.dispatcher.requests == 0

    def test_signature_mode(self):
        """Test forced call mode on an identifier inside a call."""
        document, offset = _document(SOURCE.replace("add(1,$ 2)", "add(1, siz$e)"))
        result = document.describe(offset, force_call=True)
        assert result.active_argument == 1
        assert result.lines == ("add (int x, **int y**) => int; Add two numbers.",)

    def test_formatting_settings(self):
        """Test that settings drive the formatting toggles."""
        source = "int __count(int __n);\nint main() { __count(1$); }\n"
        settings = EldocSettings(use_unicode=True, strip_underscores=False)
        document, offset = _document(source, settings=settings)
        assert document.documentation(offset) == "__count (**int __n**) ⇒ int"

        document.settings.strip_underscores = True
        assert document.documentation(offset) == "count (**int n**) ⇒ int"


class TestCaching:
    """Test reuse of backend answers across ticks and edits."""

    def test_repeated_queries_are_cached(self):
        """Test that a second tick does not query the backend again."""
        document, offset = _document()
        first = document.documentation(offset)
        assert document.dispatcher.requests == 1
        assert document.documentation(offset) == first
        assert document.dispatcher.requests == 1

    def test_reset_forces_new_query(self):
        """Test that a reset makes the next tick ask the backend again."""
        document, offset = _document()
        document.documentation(offset)
        assert document.reset() == 1
        document.documentation(offset)
        assert document.dispatcher.requests == 2

    def test_edit_before_region_keeps_entry(self):
        """Test that an edit before the cached region only shifts it."""
        document, offset = _document()
        first = document.documentation(offset)
        document.apply_edit(0, 0, "\n\n")
        assert document.documentation(offset + 2) == first
        assert document.dispatcher.requests == 1

    def test_edit_touching_region_queries_again(self):
        """Test that renaming the call head invalidates its entry."""
        document, offset = _document()
        document.documentation(offset)
        head = document.text.index("add(1")
        document.apply_edit(head, head + 3, "sum")
        assert document.documentation(offset) is None
        assert document.dispatcher.requests == 2

    def test_replace_text_resets(self):
        """Test that replacing the whole buffer drops cached answers."""
        document, offset = _document()
        document.documentation(offset)
        document.replace_text(document.text + "\n")
        assert len(document.cache) == 0
        document.replace_text(document.text)
        document.documentation(offset)
        assert len(document.cache) == 1


class TestBackendEncoding:
    """Test highlighting driven by the backend placeholder encoding."""

    def test_single_typed_argument(self, make_document):
        """Test a candidate encoded for the one argument typed so far."""
        candidate = Candidate("f", "void", "(int x, int y)", placeholders=(5, 6))
        document, offset = make_document(
            "void f(int x, int y);\nvoid g() { f(a$", backend=FakeBackend([candidate])
        )
        assert document.documentation(offset) == "f (int **x**, int y) => void"


class TestAsynchronousBackend:
    """Test the pending path with a backend answering later."""

    def test_refresh_after_reply(self, make_document, fake_backend):
        """Test that a late reply is presented on the refreshed tick."""
        refreshes = []
        fake_backend.hold = True
        document, offset = make_document(
            "int main() { return add(1,$ 2); }",
            backend=fake_backend,
            refresh=lambda: refreshes.append(True),
        )

        assert document.documentation(offset) is None
        assert refreshes == []

        fake_backend.release()
        assert refreshes == [True]
        assert document.documentation(offset) == (
            "add (int x, **int y**) => int; Add two numbers. | "
            "add (double x, **double y**) => double"
        )
        assert fake_backend.requests == 1

    def test_waiting_request_reused(self, make_document, fake_backend):
        """Test that ticks before the reply share one request and one refresh."""
        refreshes = []
        fake_backend.hold = True
        document, offset = make_document(
            "int main() { return add(1,$ 2); }",
            backend=fake_backend,
            refresh=lambda: refreshes.append(True),
        )

        for _ in range(3):
            assert document.documentation(offset) is None
        assert fake_backend.requests == 1

        fake_backend.release()
        assert refreshes == [True]
        assert document.documentation(offset) is not None
        assert fake_backend.requests == 1

    def test_edit_releases_waiting_request(self, make_document, fake_backend):
        """Test that an edit lets the next tick ask the backend again."""
        fake_backend.hold = True
        document, offset = make_document(
            "int main() { return add(1,$ 2); }", backend=fake_backend
        )
        document.documentation(offset)
        end = len(document.text)
        document.apply_edit(end, end, " ")
        document.documentation(offset)
        assert fake_backend.requests == 2

    def test_stale_reply_after_edit(self, make_document):
        """Test that a reply for renamed text is neither cached nor refreshed."""
        refreshes = []
        backend = FakeBackend(hold=True)
        document, offset = make_document(
            "int main() { return add(1,$ 2); }",
            backend=backend,
            refresh=lambda: refreshes.append(True),
        )
        document.documentation(offset)
        head = document.text.index("add")
        document.apply_edit(head, head + 3, "sub")
        backend.release()

        assert refreshes == []
        assert len(document.cache) == 0


OVERLOADS = """\
/** docstring for f */
void f(string x);
/** docstring for f */
void f(int x, int y);
/** docstring for f */
void f(double x, double y);
/** docstring for g */
void g(string /** arg */ x) {
  /** vector y */
  vector<float> y;
  f(x,$ x);
}
"""


class TestOverloads:
    """Test overloaded functions with documented parameters and locals."""

    def test_every_overload_shown(self):
        """Test that candidates of other arities are shown without highlight."""
        document, offset = _document(OVERLOADS)
        assert document.describe(offset).lines == (
            "f (string x) => void; docstring for f",
            "f (int x, **int y**) => void; docstring for f",
            "f (double x, **double y**) => void; docstring for f",
        )

    def test_documented_parameter(self):
        """Test that a doc comment inside a parameter becomes its brief."""
        document, offset = _document(OVERLOADS.replace("f(x,$ x)", "f(x, $x)"))
        assert document.documentation(offset) == "x => string; arg"

    def test_documented_local(self):
        """Test a local variable with a doc comment above it."""
        document, offset = _document(OVERLOADS.replace("f(x,$ x)", "f($y, x)"))
        assert document.documentation(offset) == "y => vector<float>; vector y"
