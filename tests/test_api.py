def _add_book(client, isbn="9780000000001", copies=1, **extra):
    payload = {"isbn": isbn, "title": "Clean Go", "copies": copies, **extra}
    return client.post("/books/", json=payload)


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.get_json() == {"ok": True}


def test_add_and_find_book(client):
    r = _add_book(client, copies=3)
    assert r.status_code == 201
    assert r.get_json()["data"]["available"] == 3

    r = client.get("/books/9780000000001")
    data = r.get_json()["data"]
    assert r.status_code == 200
    assert (data["copies"], data["available"]) == (3, 3)

    r = client.get("/books/")
    assert len(r.get_json()["data"]) == 1


def test_add_book_errors(client):
    _add_book(client)

    r = _add_book(client)
    assert r.status_code == 409
    assert r.get_json()["code"] == "duplicate_isbn"

    r = _add_book(client, isbn="123")
    assert r.status_code == 400
    assert r.get_json()["field"] == "isbn"

    r = client.post("/books/", json={"isbn": "9780000000002", "title": "T" * 201})
    assert r.get_json()["code"] == "title_too_long"


def test_book_not_found(client):
    r = client.get("/books/missing")
    assert r.status_code == 404
    assert r.get_json()["success"] is False


def test_lending_over_http(client):
    book_id = _add_book(client).get_json()["data"]["id"]

    r = client.post("/loans/", json={
        "book_id": book_id,
        "loan_date": "2025-01-01T10:00:00",
        "due_date": "2025-01-15T10:00:00",
    })
    assert r.status_code == 201
    loan = r.get_json()["data"]
    assert loan["status"] == "active"

    r = client.post("/loans/", json={"book_id": book_id})
    assert r.status_code == 409
    assert r.get_json()["code"] == "unavailable"

    r = client.post(f"/loans/{loan['id']}/return")
    assert r.status_code == 200
    assert r.get_json()["data"]["status"] == "returned"

    r = client.post(f"/loans/{loan['id']}/return")
    assert r.status_code == 409
    assert r.get_json()["code"] == "already_returned"

    r = client.get("/books/9780000000001")
    assert r.get_json()["data"]["available"] == 1


def test_loan_request_validation(client):
    book_id = _add_book(client).get_json()["data"]["id"]

    assert client.post("/loans/", json={}).status_code == 400
    assert client.post("/loans/", json={"book_id": book_id, "loan_date": "not-a-date"}).status_code == 400

    r = client.post("/loans/", json={
        "book_id": book_id,
        "loan_date": "2025-01-01",
        "due_date": "2025-02-01",
    })
    assert r.status_code == 400
    assert r.get_json()["code"] == "loan_duration_exceeded"


def test_list_and_get_loans(client):
    book_id = _add_book(client, copies=2).get_json()["data"]["id"]
    loan_id = client.post("/loans/", json={"book_id": book_id}).get_json()["data"]["id"]
    client.post("/loans/", json={"book_id": book_id})
    client.post(f"/loans/{loan_id}/return")

    assert client.get(f"/loans/{loan_id}").get_json()["data"]["returned"] is True
    assert len(client.get(f"/loans/?book_id={book_id}").get_json()["data"]) == 2
    assert len(client.get(f"/loans/?book_id={book_id}&open=1").get_json()["data"]) == 1
    assert client.get("/loans/999").status_code == 404


def test_update_copies_and_remove(client):
    book_id = _add_book(client, copies=2).get_json()["data"]["id"]
    client.post("/loans/", json={"book_id": book_id})

    r = client.put("/books/9780000000001/copies", json={"copies": 0})
    assert r.status_code == 409
    assert r.get_json()["code"] == "copies_below_on_loan"

    r = client.put("/books/9780000000001/copies", json={"copies": 5})
    assert r.get_json()["data"]["available"] == 4

    assert client.put("/books/9780000000001/copies", json={}).status_code == 400

    r = client.delete("/books/9780000000001")
    assert r.status_code == 409
    assert r.get_json()["code"] == "book_on_loan"

    assert client.delete("/books/missing").status_code == 404


def test_reference_endpoints(client):
    r = client.post("/categories/", json={"name": "Computers"})
    assert r.status_code == 201
    assert client.post("/categories/", json={"name": "Computers"}).status_code == 409

    author_id = client.post("/authors/", json={"name": "Jane Dev"}).get_json()["data"]["id"]
    publisher_id = client.post("/publishers/", json={"name": "Acme"}).get_json()["data"]["id"]
    category_id = r.get_json()["data"]["id"]

    r = _add_book(client, publisher_id=publisher_id, author_ids=[author_id])
    assert r.get_json()["data"]["authors"] == [author_id]

    r = client.post(f"/books/9780000000001/categories/{category_id}")
    assert r.status_code == 201
    assert r.get_json()["data"]["categories"] == [category_id]

    assert client.post("/reviews/", json={"rating": 5}).status_code == 201
    r = client.post("/reviews/", json={"rating": 6})
    assert r.status_code == 400
    assert r.get_json()["code"] == "rating_out_of_range"

    assert len(client.get("/authors/").get_json()["data"]) == 1
    assert len(client.get("/publishers/").get_json()["data"]) == 1


def test_loan_dates_with_and_without_offset(client):
    book_id = _add_book(client).get_json()["data"]["id"]

    r = client.post("/loans/", json={
        "book_id": book_id,
        "loan_date": "2025-01-01T00:00:00+00:00",
        "due_date": "2025-01-05T00:00:00",
    })
    assert r.status_code == 201
    loan = r.get_json()["data"]
    assert loan["loan_date"] == "2025-01-01T00:00:00"
    assert loan["due_date"] == "2025-01-05T00:00:00"


def test_add_book_with_scalar_author_ids(client):
    r = _add_book(client, author_ids=5)
    assert r.status_code == 400
    assert r.get_json()["field"] == "author_ids"

    assert client.get("/books/9780000000001").status_code == 404
    assert client.get("/books/").get_json()["data"] == []
