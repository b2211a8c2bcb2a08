"""Unit tests for OutputManager."""

from kubecraft.output import OutputManager, Verbosity, get_output, set_output
from kubecraft.validation import ValidationResult


class TestOutputManager:
    """Test verbosity filtering and result output."""

    def test_quiet_hides_status(self, capsys):
        """Test that QUIET suppresses everything but errors."""
        output = OutputManager(verbosity=Verbosity.QUIET)
        output.success("done")
        output.info("info")
        output.warning("careful")
        output.print("plain")
        output.table("Title", ["A"], [["1"]])
        output.error("broken")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "broken" in captured.err

    def test_normal(self, capsys):
        """Test that NORMAL shows status but not verbose messages."""
        output = OutputManager()
        output.success("done")
        output.verbose("details")

        captured = capsys.readouterr()
        assert "done" in captured.out
        assert "details" not in captured.out

    def test_verbose(self, capsys):
        """Test that VERBOSE shows verbose messages."""
        OutputManager(verbosity=Verbosity.VERBOSE).verbose("details")
        assert "details" in capsys.readouterr().out

    def test_error_suggestion(self, capsys):
        """Test that suggestions follow errors outside QUIET mode."""
        OutputManager().error("broken", suggestion="try again")
        err = capsys.readouterr().err
        assert "broken" in err
        assert "try again" in err

    def test_validation(self, capsys):
        """Test that validation errors always print and warnings only when verbose."""
        result = ValidationResult.from_messages(["bad port"], ["no selector"])

        OutputManager().validation("web (service)", result)
        captured = capsys.readouterr()
        assert "web (service): bad port" in captured.err
        assert "no selector" not in captured.out

        OutputManager(verbosity=Verbosity.VERBOSE).validation("web (service)", result)
        assert "web (service): no selector" in capsys.readouterr().out

    def test_result(self, capsys):
        """Test that results are written unstyled with one trailing newline."""
        output = OutputManager(verbosity=Verbosity.QUIET)
        output.result("a: 1")
        output.result("b: 2\n")
        assert capsys.readouterr().out == "a: 1\nb: 2\n"

    def test_global_manager(self):
        """Test replacing the shared manager."""
        manager = OutputManager(verbosity=Verbosity.VERBOSE)
        set_output(manager)
        assert get_output() is manager
