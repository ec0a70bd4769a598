def _iso(dt):
    return dt.isoformat() if dt else None


def record_json(r, now=None):
    return {
        "id": r.id,
        "userId": r.user_id,
        "bookId": r.book_id,
        "title": r.book_title or "Unknown book",
        "author": r.book_author or "",
        "userName": r.user_name,
        "borrowedAt": _iso(r.borrowed_at),
        "dueDate": _iso(r.due_date),
        "renewed": bool(r.renewed),
        "renewedAt": _iso(r.renewed_at),
        "renewCount": r.renew_count,
        "returned": bool(r.returned),
        "returnedAt": _iso(r.returned_at),
        "daysRemaining": r.days_remaining(now),
        "overdue": r.is_overdue(now),
    }


def history_json(h):
    return {
        "id": h.id,
        "userId": h.user_id,
        "bookId": h.book_id,
        "title": h.book_title or "Unknown book",
        "author": h.book_author or "",
        "userName": h.user_name,
        "action": h.action,
        "borrowDate": _iso(h.borrow_date),
        "dueDate": _iso(h.due_date),
        "returnDate": _iso(h.return_date),
        "isRenewed": bool(h.is_renewed),
        "renewCount": h.renew_count,
        "notes": h.notes,
    }


def request_json(q):
    return {
        "id": q.id,
        "userId": q.user_id,
        "userName": q.user_name,
        "bookId": q.book_id,
        "bookTitle": q.book_title,
        "bookAuthor": q.book_author,
        "recordId": q.record_id,
        "type": q.type,
        "status": q.status,
        "reason": q.reason,
        "handledAt": _iso(q.handled_at),
        "createdAt": _iso(q.created_at),
    }
