from floris.db.database import get_session, init_db
from floris.db.operations import (
    count_owned_copies,
    create_user_flower,
    credit_points,
    debit_points,
    delete_user_flower,
    find_sellable_flower,
    get_or_create_user,
    get_user,
    get_user_by_sns,
    get_user_flower,
    get_user_flower_by_token,
    list_user_flowers,
    mark_claimed,
    mark_shared,
)

__all__ = [
    "count_owned_copies",
    "create_user_flower",
    "credit_points",
    "debit_points",
    "delete_user_flower",
    "find_sellable_flower",
    "get_or_create_user",
    "get_session",
    "get_user",
    "get_user_by_sns",
    "get_user_flower",
    "get_user_flower_by_token",
    "init_db",
    "list_user_flowers",
    "mark_claimed",
    "mark_shared",
]
