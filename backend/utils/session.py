# utils/session.py
import uuid
from typing import List

from fastapi import Request

# Keys stored in the signed session cookie
GUEST_ID_KEY = "guest_id"
GUEST_ORDERS_KEY = "orders"

# Maximum number of guest order ids remembered per session
GUEST_ORDERS_LIMIT = 50

def guest_session_id(request: Request) -> str:
    # Created lazily on the first anonymous request
    sid = request.session.get(GUEST_ID_KEY)
    if not sid:
        sid = uuid.uuid4().hex
        request.session[GUEST_ID_KEY] = sid
    return sid

def remember_guest_order(request: Request, order_id: int) -> None:
    orders = list(request.session.get(GUEST_ORDERS_KEY) or [])
    orders.append(order_id)
    request.session[GUEST_ORDERS_KEY] = orders[-GUEST_ORDERS_LIMIT:]

def guest_order_ids(request: Request) -> List[int]:
    return [int(o) for o in request.session.get(GUEST_ORDERS_KEY) or []]
