"""
Tests for the subprocess executor: streaming and exit handling.
"""

import pytest

from updatewiz.engine.errors import NonZeroExitError, SpawnError
from updatewiz.engine.executor import SubprocessExecutor, build_environment


async def collect(handle):
    return [c async for c in handle]


class TestBuildEnvironment:
    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("UPDATEWIZ_TEST_VAR", "parent")
        env = build_environment({"UPDATEWIZ_TEST_VAR": "child", "skip_brew": "1"})
        assert env["UPDATEWIZ_TEST_VAR"] == "child"
        assert env["skip_brew"] == "1"

    def test_inherits_parent(self, monkeypatch):
        monkeypatch.setenv("UPDATEWIZ_TEST_VAR", "parent")
        assert build_environment()["UPDATEWIZ_TEST_VAR"] == "parent"


class TestSubprocessExecutor:
    @pytest.mark.asyncio
    async def test_streams_lines_in_order(self, script_factory):
        script = script_factory("""
            import sys
            for i in range(5):
                print(f"line {i}", flush=True)
        """)
        handle = await SubprocessExecutor().execute(script)
        chunks = await collect(handle)
        assert await handle.wait() == 0
        assert [c.text for c in chunks] == [f"line {i}\n" for i in range(5)]
        assert [c.seq for c in chunks] == list(range(5))

    @pytest.mark.asyncio
    async def test_both_streams_captured(self, script_factory):
        script = script_factory("""
            import sys
            print("to stdout", flush=True)
            print("to stderr", file=sys.stderr, flush=True)
        """)
        handle = await SubprocessExecutor().execute(script)
        chunks = await collect(handle)
        await handle.wait()
        by_stream = {c.stream: c.text for c in chunks}
        assert by_stream == {"stdout": "to stdout\n", "stderr": "to stderr\n"}
        assert handle.transcript == chunks

    @pytest.mark.asyncio
    async def test_environment_passed(self, script_factory):
        script = script_factory("""
            import os
            print(os.environ.get("skip_brew", "unset"), os.environ.get("skip_npm", "unset"))
        """)
        handle = await SubprocessExecutor().execute(script, {"skip_brew": "1"})
        chunks = await collect(handle)
        await handle.wait()
        assert chunks[0].text == "1 unset\n"

    @pytest.mark.asyncio
    async def test_no_positional_arguments(self, script_factory):
        script = script_factory("""
            import sys
            print(len(sys.argv))
        """)
        handle = await SubprocessExecutor().execute(script)
        chunks = await collect(handle)
        await handle.wait()
        assert chunks[0].text == "1\n"

    @pytest.mark.asyncio
    async def test_unterminated_last_line(self, script_factory):
        script = script_factory("""
            import sys
            sys.stdout.write("no newline")
        """)
        handle = await SubprocessExecutor().execute(script)
        chunks = await collect(handle)
        await handle.wait()
        assert [c.text for c in chunks] == ["no newline"]

    @pytest.mark.asyncio
    async def test_long_line_split_not_lost(self, script_factory):
        script = script_factory("""
            print("x" * 5000)
        """)
        handle = await SubprocessExecutor(read_limit=1024).execute(script)
        chunks = await collect(handle)
        await handle.wait()
        assert len(chunks) > 1
        assert "".join(c.text for c in chunks) == "x" * 5000 + "\n"

    @pytest.mark.asyncio
    async def test_non_zero_exit_keeps_transcript(self, script_factory):
        script = script_factory("""
            import sys
            print("Updating A", flush=True)
            sys.exit(3)
        """)
        handle = await SubprocessExecutor().execute(script)
        await collect(handle)
        with pytest.raises(NonZeroExitError) as excinfo:
            await handle.wait()
        assert excinfo.value.code == 3
        assert [c.text for c in excinfo.value.transcript] == ["Updating A\n"]

    @pytest.mark.asyncio
    async def test_missing_executable(self, tmp_path):
        with pytest.raises(SpawnError) as excinfo:
            await SubprocessExecutor().execute(tmp_path / "does-not-exist.sh")
        assert excinfo.value.transcript == ()

    @pytest.mark.asyncio
    async def test_not_executable(self, tmp_path):
        script = tmp_path / "htotheizzo.sh"
        script.write_text("echo hi\n")
        script.chmod(0o644)
        with pytest.raises(SpawnError):
            await SubprocessExecutor().execute(script)

    @pytest.mark.asyncio
    async def test_terminate(self, script_factory):
        script = script_factory("""
            import time
            print("started", flush=True)
            time.sleep(30)
        """)
        handle = await SubprocessExecutor().execute(script)
        async for c in handle:
            assert c.text == "started\n"
            handle.terminate()
        with pytest.raises(NonZeroExitError):
            await handle.wait()
