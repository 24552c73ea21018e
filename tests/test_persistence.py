import asyncpg
import pytest

from auth import security
from todos.persistence import TodoPersistence


def _todo(todo_id, todolist_id, title, done=False, username="alice"):
    return {"id": todo_id, "title": title, "done": done, "todolist_id": todolist_id, "username": username}


def _list(list_id, title, username="alice"):
    return {"id": list_id, "title": title, "username": username}


class TestDerivedStatus:
    def setup_method(self):
        self.store = TodoPersistence("alice")

    def test_empty_list_is_not_done(self):
        todo_list = {"id": 1, "todos": []}
        assert self.store.is_done_todo_list(todo_list) is False
        assert self.store.has_undone_todos(todo_list) is False

    def test_list_with_all_todos_done_is_done(self):
        todo_list = {"id": 1, "todos": [_todo(1, 1, "a", True), _todo(2, 1, "b", True)]}
        assert self.store.is_done_todo_list(todo_list) is True
        assert self.store.has_undone_todos(todo_list) is False

    def test_one_undone_todo_keeps_list_open(self):
        todo_list = {"id": 1, "todos": [_todo(1, 1, "a", True), _todo(2, 1, "b", False)]}
        assert self.store.is_done_todo_list(todo_list) is False
        assert self.store.has_undone_todos(todo_list) is True

    def test_partition_is_stable(self):
        lists = [
            {"id": 1, "title": "a", "todos": [_todo(1, 1, "x", True)]},
            {"id": 2, "title": "b", "todos": []},
            {"id": 3, "title": "c", "todos": [_todo(2, 3, "y", True)]},
            {"id": 4, "title": "d", "todos": [_todo(3, 4, "z", False)]},
        ]
        assert [l["id"] for l in self.store.partition_todo_lists(lists)] == [2, 4, 1, 3]

    def test_todos_info_counts(self):
        lists = [
            {"id": 1, "todos": [_todo(1, 1, "x", True), _todo(2, 1, "y", False)]},
            {"id": 2, "todos": []},
        ]
        assert self.store.todos_info(lists) == [
            {"count_all": 2, "count_done": 1, "is_done": False},
            {"count_all": 0, "count_done": 0, "is_done": False},
        ]


@pytest.mark.asyncio
async def test_sorted_todo_lists_attaches_todos_and_puts_done_lists_last(fake_db):
    fake_db.returns([_list(1, "Chores"), _list(2, "Home"), _list(3, "Work")])
    fake_db.returns([_todo(10, 1, "sweep", True), _todo(11, 2, "milk"), _todo(12, 1, "dust", True)])

    lists = await TodoPersistence("alice").sorted_todo_lists()

    assert [l["title"] for l in lists] == ["Home", "Work", "Chores"]
    assert [t["id"] for t in lists[2]["todos"]] == [10, 12]
    assert lists[1]["todos"] == []
    assert all(args == ("alice",) for _, args in fake_db.calls)
    assert all("username = $1" in sql for sql, _ in fake_db.calls)


@pytest.mark.asyncio
async def test_load_todo_list_returns_none_when_list_row_missing(fake_db):
    fake_db.returns([])
    fake_db.returns([])

    assert await TodoPersistence("alice").load_todo_list(999999) is None
    assert [args for _, args in fake_db.calls] == [(999999, "alice"), (999999, "alice")]


@pytest.mark.asyncio
async def test_load_todo_list_attaches_its_todos(fake_db):
    fake_db.returns([_list(5, "Home")])
    fake_db.returns([_todo(1, 5, "milk")])

    todo_list = await TodoPersistence("alice").load_todo_list(5)

    assert todo_list["title"] == "Home"
    assert todo_list["todos"] == [_todo(1, 5, "milk")]


@pytest.mark.asyncio
async def test_load_todo_list_fails_when_either_read_fails(fake_db):
    fake_db.returns([_list(5, "Home")])
    fake_db.raises(ConnectionRefusedError("store down"))

    with pytest.raises(ConnectionRefusedError):
        await TodoPersistence("alice").load_todo_list(5)


@pytest.mark.asyncio
async def test_sorted_todos_orders_in_sql(fake_db):
    fake_db.returns([_todo(2, 5, "apples"), _todo(1, 5, "Bread", True)])

    todos = await TodoPersistence("alice").sorted_todos({"id": 5})

    sql, args = fake_db.calls[0]
    assert "ORDER BY done ASC, lower(title) ASC" in sql
    assert args == (5, "alice")
    assert [t["id"] for t in todos] == [2, 1]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method, args",
    [
        ("toggle_done_todo", (1, 2)),
        ("remove_todo", (1, 2)),
        ("mark_all_done", (1,)),
        ("delete_todo_list", (1,)),
        ("set_title", (1, "Renamed")),
        ("add_todo", ("Buy milk", 1)),
    ],
)
async def test_writes_report_false_when_no_row_matched(fake_db, method, args):
    fake_db.returns(row_count=0)

    result = await getattr(TodoPersistence("alice"), method)(*args)

    assert result is False
    sql, params = fake_db.calls[0]
    assert params[-1] == "alice"
    assert "username = $" in sql


@pytest.mark.asyncio
async def test_mark_all_done_true_when_rows_matched(fake_db):
    fake_db.returns(row_count=3)
    assert await TodoPersistence("alice").mark_all_done(1) is True


@pytest.mark.asyncio
async def test_add_todo_inserts_through_owned_list(fake_db):
    fake_db.returns(row_count=1)

    assert await TodoPersistence("alice").add_todo("Buy milk", 4) is True

    sql, params = fake_db.calls[0]
    assert sql.startswith("INSERT INTO todos (title, todolist_id, username) SELECT")
    assert "FROM todolists" in sql
    assert params == ("Buy milk", 4, "alice")


@pytest.mark.asyncio
async def test_exists_todo_list_title(fake_db):
    fake_db.returns([{"ok": 1}])
    fake_db.returns([])
    store = TodoPersistence("alice")

    assert await store.exists_todo_list_title("Home") is True
    assert await store.exists_todo_list_title("Work") is False
    assert fake_db.calls[0][1] == ("Home", "alice")


@pytest.mark.asyncio
async def test_create_todo_list_returns_false_on_duplicate_title(fake_db):
    fake_db.raises(asyncpg.exceptions.UniqueViolationError("duplicate key value violates unique constraint"))
    assert await TodoPersistence("alice").create_todo_list("Groceries") is False


@pytest.mark.asyncio
async def test_create_todo_list_propagates_other_store_errors(fake_db):
    fake_db.raises(asyncpg.exceptions.ForeignKeyViolationError("no such user"))
    with pytest.raises(asyncpg.exceptions.ForeignKeyViolationError):
        await TodoPersistence("ghost").create_todo_list("Groceries")


@pytest.mark.asyncio
async def test_set_title_lets_unique_violation_propagate(fake_db):
    fake_db.raises(asyncpg.exceptions.UniqueViolationError("duplicate key"))
    store = TodoPersistence("alice")

    with pytest.raises(asyncpg.exceptions.UniqueViolationError) as excinfo:
        await store.set_title(1, "Home")

    assert store.is_unique_constraint_violation(excinfo.value)


@pytest.mark.asyncio
async def test_authenticate_uses_given_username(fake_db):
    fake_db.returns([{"password": security.hash_password("secret")}])
    fake_db.returns([])
    store = TodoPersistence(None)

    assert await store.authenticate("alice", "secret") is True
    assert await store.authenticate("nobody", "secret") is False
    assert [args for _, args in fake_db.calls] == [("alice",), ("nobody",)]


@pytest.mark.asyncio
async def test_authenticate_rejects_wrong_password(fake_db):
    fake_db.returns([{"password": security.hash_password("secret")}])
    assert await TodoPersistence(None).authenticate("alice", "wrong") is False
