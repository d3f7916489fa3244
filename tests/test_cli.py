"""Tests for the command-line interface."""

from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest
from click.testing import CliRunner

from focus_tasks import cli
from focus_tasks.client.api_client import TaskApiClient
from focus_tasks.client.controller import AppController, LOAD_ERROR
from focus_tasks.domain.task import Task
from focus_tasks.exceptions import ApiError
from focus_tasks.web.server import app, get_store


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def in_process_api(store):
    """Make the CLI talk to the app in-process instead of over the network"""
    app.dependency_overrides[get_store] = lambda: store

    def factory(base_url, timeout=30.0):
        return TaskApiClient(base_url, timeout=timeout, transport=httpx.ASGITransport(app=app))

    with patch.object(cli, "TaskApiClient", side_effect=factory):
        yield store

    app.dependency_overrides.clear()


class TestOneShotCommands:
    """Test list/add/toggle/edit/delete"""

    def test_list_empty(self, runner, in_process_api):
        result = runner.invoke(cli.main, ["list"])

        assert result.exit_code == 0, result.output
        assert "0%" in result.output

    def test_add(self, runner, in_process_api):
        result = runner.invoke(cli.main, ["add", "Buy milk"])

        assert result.exit_code == 0, result.output
        assert "Buy milk" in result.output
        assert [t.title for t in in_process_api.list_tasks()] == ["Buy milk"]

    def test_toggle(self, runner, in_process_api):
        task = in_process_api.create_task("Buy milk")

        result = runner.invoke(cli.main, ["toggle", "1"])

        assert result.exit_code == 0, result.output
        assert in_process_api.get_task(task.id).completed is True
        assert "100%" in result.output

    def test_edit(self, runner, in_process_api):
        task = in_process_api.create_task("Buy milk")

        result = runner.invoke(cli.main, ["edit", "1", "Buy oat milk"])

        assert result.exit_code == 0, result.output
        assert in_process_api.get_task(task.id).title == "Buy oat milk"

    def test_delete(self, runner, in_process_api):
        in_process_api.create_task("Buy milk")
        keep = in_process_api.create_task("Walk the dog")

        result = runner.invoke(cli.main, ["delete", "1"])

        assert result.exit_code == 0, result.output
        assert in_process_api.list_tasks() == [keep]

    def test_bad_row(self, runner, in_process_api):
        result = runner.invoke(cli.main, ["toggle", "5"])

        assert result.exit_code == 2
        assert "No task on row 5" in result.output

    def test_server_unreachable(self, runner):
        failing = Mock(spec=TaskApiClient)
        failing.__aenter__ = AsyncMock(return_value=failing)
        failing.__aexit__ = AsyncMock(return_value=None)
        failing.list_tasks = AsyncMock(side_effect=ApiError("connection refused"))

        with patch.object(cli, "TaskApiClient", return_value=failing):
            result = runner.invoke(cli.main, ["list"])

        assert result.exit_code == 1
        assert "Having trouble reaching the server" in result.output

    def test_api_url_option(self, runner, in_process_api):
        result = runner.invoke(cli.main, ["--api-url", "http://other/api/tasks", "list"])

        assert result.exit_code == 0, result.output
        assert cli.TaskApiClient.call_args[0][0] == "http://other/api/tasks"


class TestServe:
    """Test the serve command"""

    def test_serve_uses_config(self, runner, test_config):
        with patch("focus_tasks.web.server.start_server") as start:
            result = runner.invoke(cli.main, ["serve", "--port", "8123"])

        assert result.exit_code == 0, result.output
        start.assert_called_once_with(host=test_config.host, port=8123, debug=False)
        assert "8123" in result.output


class TestInteractiveCommands:
    """Test the command handler behind `ui`"""

    @pytest.fixture
    def controller(self):
        api = Mock(spec=TaskApiClient)
        api.list_tasks = AsyncMock(return_value=[Task("t1", "Buy milk")])
        api.create_task = AsyncMock(return_value=Task("t2", "Walk"))
        api.update_task = AsyncMock(return_value={"id": "t1", "title": "Buy oat milk"})
        api.delete_task = AsyncMock(return_value="Task deleted")
        return AppController(api)

    async def test_quit(self, controller):
        assert await cli.handle_command(controller, "q") is False

    async def test_add(self, controller):
        await controller.load()

        assert await cli.handle_command(controller, "a Walk") is True

        assert [t.id for t in controller.tasks] == ["t1", "t2"]

    async def test_edit_write_save(self, controller):
        await controller.load()

        await cli.handle_command(controller, "e 1")
        await cli.handle_command(controller, "w Buy oat milk")
        assert controller.snapshot().editing_title == "Buy oat milk"

        await cli.handle_command(controller, "s")

        controller.api.update_task.assert_awaited_once_with("t1", title="Buy oat milk")
        assert controller.tasks[0].title == "Buy oat milk"
        assert controller.snapshot().editing_task_id is None

    async def test_save_with_text(self, controller):
        await controller.load()

        await cli.handle_command(controller, "e 1")
        await cli.handle_command(controller, "s Buy oat milk")

        controller.api.update_task.assert_awaited_once_with("t1", title="Buy oat milk")
        assert controller.snapshot().editing_task_id is None

    async def test_save_when_not_editing(self, controller):
        await controller.load()

        assert await cli.handle_command(controller, "s Buy oat milk") is True

        controller.api.update_task.assert_not_awaited()

    async def test_cancel(self, controller):
        await controller.load()
        await cli.handle_command(controller, "e 1")

        await cli.handle_command(controller, "c")

        assert controller.snapshot().editing_task_id is None
        controller.api.update_task.assert_not_awaited()

    async def test_delete(self, controller):
        await controller.load()

        await cli.handle_command(controller, "d 1")

        assert controller.tasks == ()

    async def test_reload_after_failure(self, controller):
        controller.api.list_tasks.side_effect = [ApiError("down"), [Task("t1", "Buy milk")]]

        await controller.load()
        assert controller.snapshot().error == LOAD_ERROR

        await cli.handle_command(controller, "r")
        assert controller.snapshot().error is None
        assert len(controller.tasks) == 1

    async def test_bad_row_number(self, controller):
        await controller.load()

        with pytest.raises(ValueError):
            await cli.handle_command(controller, "t abc")
