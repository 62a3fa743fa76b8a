import pytest

from todosync.vault import DocumentNotFoundError, monthly_todo_candidates


class TestMonthlyTodoCandidates:

    def test_suffixed_names_come_first(self):
        assert monthly_todo_candidates("2025", "01") == [
            "Todo/2025/01月.md",
            "Todo/2025/1月.md",
            "Todo/2025/01.md",
            "Todo/2025/1.md",
        ]

    def test_month_with_suffix_is_accepted(self):
        assert monthly_todo_candidates("2025", "3月")[0] == "Todo/2025/03月.md"

    def test_non_numeric_month_is_used_verbatim(self):
        assert monthly_todo_candidates("2025", "backlog") == [
            "Todo/2025/backlog月.md",
            "Todo/2025/backlog.md",
        ]


class TestVaultStore:

    def test_write_then_read(self, vault):
        vault.write_text("Todo/2025/01月.md", "## 1/27\n- [ ] 歯医者")
        assert vault.exists("Todo/2025/01月.md")
        assert vault.read_text("Todo/2025/01月.md") == "## 1/27\n- [ ] 歯医者"

    def test_missing_file(self, vault):
        with pytest.raises(DocumentNotFoundError):
            vault.read_text("Todo/2025/01月.md")

    def test_missing_file_is_a_file_not_found_error(self, vault):
        with pytest.raises(FileNotFoundError):
            vault.resolve_monthly_todo_path("2025", "01")

    def test_resolve_prefers_suffixed_name(self, vault):
        vault.write_text("Todo/2025/1.md", "plain")
        vault.write_text("Todo/2025/01月.md", "suffixed")
        assert vault.resolve_monthly_todo_path("2025", "1") == "Todo/2025/01月.md"

    def test_resolve_falls_back(self, vault):
        vault.write_text("Todo/2025/1.md", "plain")
        assert vault.resolve_monthly_todo_path("2025", "01") == "Todo/2025/1.md"

    def test_paths_cannot_escape_root(self, vault):
        with pytest.raises(ValueError):
            vault.read_text("../outside.md")
