import sys
from unittest.mock import patch

import pytest

from scriptjob.errors import HostApiInstallError
from scriptjob.job.python_job import LifecycleState
from scriptjob.job.result import ResultCode, ResultKind


class TestValidation:
    """Working directory and script checks happen before any interpreter exists"""

    def test_missing_working_directory(self, make_job, tmp_path):
        job = make_job(tmp_path / "does-not-exist")

        with patch("scriptjob.job.python_job.scoped_interpreter") as scoped, patch(
            "scriptjob.job.python_job.install_host_api"
        ) as install:
            result = job.exec()

        assert result.kind is ResultKind.ERROR
        assert result.summary == "bad working directory"
        assert result.code is ResultCode.INVALID_CONFIGURATION
        assert "does-not-exist" in result.details
        scoped.assert_not_called()
        install.assert_not_called()
        assert job.state is LifecycleState.FINALIZED

    def test_working_directory_is_a_file(self, make_job, tmp_path):
        not_a_dir = tmp_path / "file"
        not_a_dir.write_text("")

        result = make_job(not_a_dir).exec()

        assert result.kind is ResultKind.ERROR
        assert result.summary == "bad working directory"

    def test_missing_script(self, make_job, tmp_path):
        module_dir = tmp_path / "empty"
        module_dir.mkdir()

        with patch("scriptjob.job.python_job.install_host_api") as install:
            result = make_job(module_dir, script="main.py").exec()

        assert result.kind is ResultKind.ERROR
        assert result.summary == "bad main script file"
        assert "empty" in result.details
        install.assert_not_called()

    def test_script_is_a_directory(self, make_job, tmp_path):
        module_dir = tmp_path / "mod"
        (module_dir / "main.py").mkdir(parents=True)

        result = make_job(module_dir).exec()

        assert result.kind is ResultKind.ERROR
        assert result.summary == "bad main script file"

    def test_script_in_a_sibling_directory(self, make_job, make_module, tmp_path):
        make_module("def run():\n    return None\n", name="shared")
        module_dir = tmp_path / "testmodule"
        module_dir.mkdir()

        result = make_job(module_dir, script="../shared/main.py").exec()

        assert result.is_success()

    def test_script_symlinked_from_elsewhere(self, make_job, make_module, tmp_path):
        shared = make_module("def run():\n    return ('from', 'shared')\n", name="shared")
        module_dir = tmp_path / "testmodule"
        module_dir.mkdir()
        (module_dir / "main.py").symlink_to(shared / "main.py")

        result = make_job(module_dir).exec()

        assert result.kind is ResultKind.ERROR
        assert (result.summary, result.details) == ("from", "shared")

    def test_missing_script_details_name_the_full_path(self, make_job, tmp_path):
        module_dir = tmp_path / "mod"
        module_dir.mkdir()

        result = make_job(module_dir, script="sub/main.py").exec()

        assert result.summary == "bad main script file"
        assert str(module_dir / "sub" / "main.py") in result.details


class TestEntryPoint:
    def test_run_returning_none_is_success(self, make_job, make_module):
        module_dir = make_module(
            """
            def run():
                return None
            """
        )
        job = make_job(module_dir)

        result = job.exec()

        assert result.kind is ResultKind.SUCCESS
        assert result.is_success()
        assert job.state is LifecycleState.FINALIZED

    def test_run_without_return_is_success(self, make_job, make_module):
        module_dir = make_module(
            """
            def run():
                x = 1
            """
        )

        assert make_job(module_dir).exec().is_success()

    def test_error_pair_is_passed_through(self, make_job, make_module):
        module_dir = make_module(
            """
            def run():
                return ("summary text", "detail text")
            """
        )

        result = make_job(module_dir).exec()

        assert result.kind is ResultKind.ERROR
        assert result.summary == "summary text"
        assert result.details == "detail text"

    def test_error_pair_as_list(self, make_job, make_module):
        module_dir = make_module(
            """
            def run():
                return ["summary", "details"]
            """
        )

        result = make_job(module_dir).exec()

        assert result.kind is ResultKind.ERROR
        assert (result.summary, result.details) == ("summary", "details")

    @pytest.mark.parametrize(
        "returned",
        [
            "42",
            "'just text'",
            "('only one',)",
            "('a', 'b', 'c')",
            "(1, 2)",
            "('summary', None)",
            "{'summary': 'details'}",
            "True",
        ],
    )
    def test_malformed_return_is_invalid_results(self, make_job, make_module, returned):
        module_dir = make_module(f"def run():\n    return {returned}\n")

        result = make_job(module_dir).exec()

        assert result.kind is ResultKind.ERROR
        assert result.summary == "invalid results"
        assert "testmodule" in result.details

    def test_missing_run(self, make_job, make_module):
        module_dir = make_module(
            '''
            """Has a docstring."""

            def pretty_name():
                return "Nice name"
            '''
        )
        job = make_job(module_dir)

        result = job.exec()

        assert result.kind is ResultKind.ERROR
        assert result.summary == "missing entry point"
        assert "run()" in result.details
        assert job.description == "Nice name"
        assert job.state is LifecycleState.FINALIZED

    def test_run_raising_is_internal_error(self, make_job, make_module):
        module_dir = make_module(
            """
            def run():
                raise ValueError("boom")
            """,
            name="raiser",
        )
        job = make_job(module_dir)

        result = job.exec()

        assert result.kind is ResultKind.INTERNAL_ERROR
        assert result.code is ResultCode.UNCAUGHT_GUEST_EXCEPTION
        assert "raiser" in result.details
        assert "ValueError: boom" in result.details
        assert job.state is LifecycleState.FINALIZED

    def test_run_calling_sys_exit_is_internal_error(self, make_job, make_module):
        module_dir = make_module(
            """
            import sys

            def run():
                sys.exit(3)
            """
        )

        result = make_job(module_dir).exec()

        assert result.kind is ResultKind.INTERNAL_ERROR
        assert result.code is ResultCode.UNCAUGHT_GUEST_EXCEPTION

    def test_run_that_is_not_callable(self, make_job, make_module):
        module_dir = make_module("run = 5\n")

        result = make_job(module_dir).exec()

        assert result.kind is ResultKind.INTERNAL_ERROR


class TestLoading:
    def test_script_raising_while_loading(self, make_job, make_module):
        module_dir = make_module(
            """
            raise RuntimeError("not today")

            def run():
                pass
            """
        )
        job = make_job(module_dir)
        progress = []
        job.on_progress(progress.append)

        result = job.exec()

        assert result.kind is ResultKind.INTERNAL_ERROR
        assert result.summary == "bad main script file"
        assert result.code is ResultCode.UNCAUGHT_GUEST_EXCEPTION
        assert "RuntimeError: not today" in result.details
        assert progress == []

    def test_syntax_error_while_loading(self, make_job, make_module):
        module_dir = make_module("def run(:\n    pass\n")

        result = make_job(module_dir).exec()

        assert result.kind is ResultKind.INTERNAL_ERROR
        assert result.summary == "bad main script file"

    def test_pre_script_raising(self, make_job, make_module):
        module_dir = make_module("def run():\n    pass\n")

        result = make_job(module_dir, pre_script="raise KeyError('x')").exec()

        assert result.kind is ResultKind.INTERNAL_ERROR
        assert result.summary == "bad internal script"
        assert result.code is ResultCode.UNCAUGHT_GUEST_EXCEPTION
        assert "testmodule" in result.details

    def test_host_api_failure_propagates(self, make_job, make_module):
        module_dir = make_module("def run():\n    pass\n")
        job = make_job(module_dir)

        with patch(
            "scriptjob.job.python_job.install_host_api",
            side_effect=RuntimeError("broken host"),
        ):
            with pytest.raises(HostApiInstallError) as excinfo:
                job.exec()

        assert excinfo.value.detail == "broken host"
        assert str(module_dir.resolve()) not in sys.path
        assert job.state is LifecycleState.FINALIZED


class TestDescription:
    def test_pretty_name_function(self, make_job, make_module):
        module_dir = make_module(
            '''
            """Docstring title."""

            def pretty_name():
                return "Custom Title"

            def run():
                pass
            '''
        )
        job = make_job(module_dir)

        job.exec()

        assert job.description == "Custom Title"
        assert job.pretty_status_message() == "Custom Title"

    def test_docstring_first_line(self, make_job, make_module):
        module_dir = make_module(
            """
            __doc__ = "First line.\\nSecond line."

            def run():
                pass
            """
        )
        job = make_job(module_dir)

        job.exec()

        assert job.description == "First line."

    def test_module_docstring(self, make_job, make_module):
        module_dir = make_module(
            '''
            """
            Set up the bootloader.

            More text.
            """

            def run():
                pass
            '''
        )
        job = make_job(module_dir)

        job.exec()

        assert job.description == "Set up the bootloader."

    def test_pretty_name_not_text_falls_back_to_docstring(self, make_job, make_module):
        module_dir = make_module(
            '''
            """From the docstring."""

            def pretty_name():
                return 17

            def run():
                pass
            '''
        )
        job = make_job(module_dir)

        job.exec()

        assert job.description == "From the docstring."

    def test_pretty_name_raising_falls_back_to_docstring(self, make_job, make_module):
        module_dir = make_module(
            '''
            """From the docstring."""

            def pretty_name():
                raise RuntimeError("no name")

            def run():
                pass
            '''
        )
        job = make_job(module_dir)

        assert job.exec().is_success()
        assert job.description == "From the docstring."

    def test_no_title_uses_generic_message(self, make_job, make_module):
        module_dir = make_module("def run():\n    pass\n", name="partition")
        job = make_job(module_dir)

        job.exec()

        assert job.description == ""
        assert job.pretty_status_message() == "Running partition operation."

    def test_pre_script_docstring_is_not_the_job_title(self, make_job, make_module):
        module_dir = make_module("def run():\n    pass\n", name="users")
        job = make_job(module_dir, pre_script='"""Test harness patches."""\n')

        assert job.exec().is_success()
        assert job.description == ""
        assert job.pretty_status_message() == "Running users operation."


class TestProgress:
    def test_zero_progress_before_run_then_guest_updates(self, make_job, make_module):
        module_dir = make_module(
            """
            def run():
                job.setprogress(0.5)
                job.setprogress(1)
            """
        )
        job = make_job(module_dir)
        progress = []
        job.on_progress(progress.append)

        assert job.exec().is_success()
        assert progress == [0, 0.5, 1.0]

    def test_progress_emitted_even_when_run_missing(self, make_job, make_module):
        module_dir = make_module("x = 1\n")
        job = make_job(module_dir)
        progress = []
        job.on_progress(progress.append)

        job.exec()

        assert progress == [0]


class TestHostApi:
    def test_script_sees_job_and_storage(self, make_job, make_module, storage):
        module_dir = make_module(
            """
            import libinstaller

            def run():
                libinstaller.globalstorage.insert("seen", {
                    "module_name": libinstaller.job.module_name,
                    "pretty_name": job.pretty_name,
                    "working_path": job.working_path,
                    "answer": job.configuration["answer"],
                    "version": libinstaller.VERSION,
                })
            """,
            name="welcome",
        )
        job = make_job(module_dir, configuration={"answer": 42})

        assert job.exec().is_success()

        seen = storage.value("seen")
        assert seen["module_name"] == "welcome"
        assert seen["pretty_name"] == "welcome"
        assert seen["working_path"] == str(module_dir)
        assert seen["answer"] == 42
        assert seen["version"] == job.settings.version
        assert "libinstaller" not in sys.modules

    def test_configuration_is_a_snapshot(self, make_job, make_module):
        module_dir = make_module(
            """
            def run():
                job.configuration["items"].append("added")
            """
        )
        configuration = {"items": ["a"]}
        job = make_job(module_dir, configuration=configuration)

        assert job.exec().is_success()
        assert configuration == {"items": ["a"]}

    def test_job_proxy_is_read_only(self, make_job, make_module):
        module_dir = make_module(
            """
            def run():
                job.module_name = "other"
            """
        )

        result = make_job(module_dir).exec()

        assert result.kind is ResultKind.INTERNAL_ERROR
        assert "AttributeError" in result.details

    def test_utils_call_process_runner(self, make_job, make_module, fake_runner):
        module_dir = make_module(
            """
            def run():
                code = utils.target_env_call(["ls", "/"])
                if code != 0:
                    return ("ls failed", str(code))
            """
        )

        assert make_job(module_dir).exec().is_success()
        assert fake_runner.calls[0]["command"] == ["ls", "/"]

    def test_check_call_failure_is_internal_error(self, make_job, make_module, fake_runner):
        fake_runner.code = 2
        module_dir = make_module(
            """
            def run():
                utils.check_target_env_call(["false"])
            """
        )

        result = make_job(module_dir).exec()

        assert result.kind is ResultKind.INTERNAL_ERROR
        assert "CalledProcessError" in result.details


class TestIsolation:
    def test_each_execution_gets_a_fresh_namespace(self, make_job, make_module, storage):
        module_dir = make_module(
            """
            try:
                counter += 1
            except NameError:
                counter = 1

            def run():
                globalstorage.insert("counter", counter)
            """
        )
        job = make_job(module_dir)

        job.exec()
        job.exec()

        assert storage.value("counter") == 1

    def test_sibling_modules_are_importable_and_dropped(self, make_job, make_module):
        module_dir = make_module(
            """
            import scriptjob_sibling_helper

            def run():
                return scriptjob_sibling_helper.check()
            """,
            **{"scriptjob_sibling_helper.py": "def check():\n    return None\n"},
        )

        assert make_job(module_dir).exec().is_success()
        assert "scriptjob_sibling_helper" not in sys.modules
        assert str(module_dir.resolve()) not in sys.path

    def test_pre_script_runs_before_each_job(self, make_job, make_module, storage):
        pre_script = (
            "globalstorage.insert('pre_runs', (globalstorage.value('pre_runs') or 0) + 1)\n"
            "PATCHED = True\n"
        )
        first = make_module(
            """
            def run():
                globalstorage.insert("first", PATCHED)
            """,
            name="first",
        )
        second = make_module(
            """
            def run():
                globalstorage.insert("second", PATCHED)
            """,
            name="second",
        )

        assert make_job(first, pre_script=pre_script).exec().is_success()
        assert make_job(second, pre_script=pre_script).exec().is_success()

        assert storage.value("pre_runs") == 2
        assert storage.value("first") is True
        assert storage.value("second") is True
        assert sorted(storage.keys()) == ["first", "pre_runs", "second"]
