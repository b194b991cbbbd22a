import runpy
import sys

import pytest

from conftest import FakeGateway
from video_summarizer import cli
from video_summarizer.errors import UpstreamFailureError
from video_summarizer.models import DEFAULT_PROMPT


VIDEO_URL = "https://example.com/v.mp4"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
  # Keep a developer's .env out of the picture.
  monkeypatch.chdir(tmp_path)
  monkeypatch.setenv("GEMINI_API_KEY", "test-key-1234567890")


def test_prints_summary(capsys):
  gateway = FakeGateway(summary="A short clip.")

  exit_code = cli.main([VIDEO_URL], gateway=gateway)

  assert exit_code == 0
  assert "A short clip." in capsys.readouterr().out
  assert gateway.calls[0][0] == DEFAULT_PROMPT


def test_passes_custom_prompt():
  gateway = FakeGateway()

  cli.main([VIDEO_URL, "Who is speaking?"], gateway=gateway)

  assert gateway.calls[0][0] == "Who is speaking?"


def test_missing_video_url_exits_with_error(capsys):
  gateway = FakeGateway()

  exit_code = cli.main([], gateway=gateway)

  assert exit_code == 1
  assert "Please provide a video URL" in capsys.readouterr().err
  assert gateway.calls == []


def test_missing_api_key_exits_before_processing(monkeypatch):
  monkeypatch.delenv("GEMINI_API_KEY")
  gateway = FakeGateway()

  with pytest.raises(SystemExit) as excinfo:
    cli.main([VIDEO_URL], gateway=gateway)

  assert excinfo.value.code == 1
  assert gateway.calls == []


def test_generation_failure_goes_to_stderr_without_failing_exit(capsys):
  gateway = FakeGateway(error=UpstreamFailureError("quota exceeded"))

  exit_code = cli.main([VIDEO_URL], gateway=gateway)

  captured = capsys.readouterr()
  assert exit_code == 0
  assert "quota exceeded" in captured.err
  assert "Summary" not in captured.out


def test_no_deadline_is_applied(monkeypatch):
  created = []
  real_workflow = cli.SummarizeWorkflow

  def recording_workflow(gateway, timeout_ms=None):
    created.append(timeout_ms)
    return real_workflow(gateway, timeout_ms=timeout_ms)

  monkeypatch.setattr(cli, "SummarizeWorkflow", recording_workflow)
  monkeypatch.setenv("PROCESSING_TIMEOUT_MS", "1")

  cli.main([VIDEO_URL], gateway=FakeGateway())

  assert created == [None]


def test_runs_as_module(monkeypatch, capsys):
  monkeypatch.setattr(sys, "argv", ["video_summarizer"])

  with pytest.raises(SystemExit) as excinfo:
    runpy.run_module("video_summarizer", run_name="__main__")

  assert excinfo.value.code == 1
  assert "Please provide a video URL" in capsys.readouterr().err
