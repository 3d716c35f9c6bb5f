def _register(client, username):
    response = client.post("/users/", json={"email": f"{username}@example.com", "username": username})
    assert response.status_code == 201
    return response.json()["id"]


def _list_product(client, seller_id, title="Camera", price="120.00"):
    categories = client.get("/products/categories").json()
    response = client.post(
        f"/products/?user_id={seller_id}",
        json={"title": title, "price": price, "category_id": categories[0]["id"]},
    )
    assert response.status_code == 201
    return response.json()["id"]


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_checkout_flow(client):
    seller = _register(client, "seller")
    buyer = _register(client, "buyer")
    camera = _list_product(client, seller)

    response = client.post(f"/cart/items?user_id={buyer}", json={"product_id": camera, "quantity": 2})
    assert response.status_code == 200
    assert response.json()["total"] == "240.00"

    response = client.post(f"/orders/?user_id={buyer}")
    assert response.status_code == 201
    order = response.json()
    assert order["status"] == "pending"
    assert order["total_amount"] == "240.00"
    assert order["items"][0]["price_at_purchase"] == "120.00"
    assert order["items"][0]["seller_name"] == "seller"

    assert client.get(f"/cart/?user_id={buyer}").json()["items"] == []

    listing = client.get(f"/orders/?user_id={buyer}").json()
    assert [o["id"] for o in listing["orders"]] == [order["id"]]
    assert listing["orders"][0]["item_count"] == 1

    response = client.put(f"/orders/{order['id']}/status?user_id={seller}", json={"status": "shipped"})
    assert response.status_code == 200
    assert client.get(f"/orders/{order['id']}?user_id={buyer}").json()["status"] == "shipped"


def test_checkout_errors(client):
    seller = _register(client, "seller")
    buyer = _register(client, "buyer")
    camera = _list_product(client, seller)

    assert client.post(f"/orders/?user_id={buyer}").status_code == 404

    client.get(f"/cart/?user_id={buyer}")
    response = client.post(f"/orders/?user_id={buyer}")
    assert response.status_code == 400
    assert response.json()["detail"] == "Cart is empty"

    client.post(f"/cart/items?user_id={buyer}", json={"product_id": camera, "quantity": 1})
    client.put(f"/products/{camera}?user_id={seller}", json={"is_available": False})

    response = client.post(f"/orders/?user_id={buyer}")
    assert response.status_code == 400
    assert response.json()["detail"]["product_ids"] == [camera]
    assert len(client.get(f"/cart/?user_id={buyer}").json()["items"]) == 1


def test_add_to_cart_errors(client):
    seller = _register(client, "seller")
    buyer = _register(client, "buyer")
    camera = _list_product(client, seller)
    client.put(f"/products/{camera}?user_id={seller}", json={"is_available": False})

    assert client.post(f"/cart/items?user_id={buyer}", json={"product_id": 999, "quantity": 1}).status_code == 404
    response = client.post(f"/cart/items?user_id={buyer}", json={"product_id": camera, "quantity": 1})
    assert response.status_code == 400
    assert response.json()["detail"] == "Product is not available"
    assert client.post(f"/cart/items?user_id={buyer}", json={"product_id": camera, "quantity": 0}).status_code == 422


def test_cart_items_are_private(client):
    seller = _register(client, "seller")
    buyer = _register(client, "buyer")
    other = _register(client, "other")
    camera = _list_product(client, seller)

    cart = client.post(f"/cart/items?user_id={buyer}", json={"product_id": camera, "quantity": 1}).json()
    item_id = cart["items"][0]["id"]

    assert client.put(f"/cart/items/{item_id}?user_id={other}", json={"quantity": 5}).status_code == 404
    assert client.delete(f"/cart/items/{item_id}?user_id={other}").status_code == 404

    assert client.put(f"/cart/items/{item_id}?user_id={buyer}", json={"quantity": 5}).json()["quantity"] == 5
    assert client.delete(f"/cart/items/{item_id}?user_id={buyer}").status_code == 204
    assert client.delete(f"/cart/?user_id={buyer}").json()["removed"] == 0


def test_orders_are_private(client):
    seller = _register(client, "seller")
    buyer = _register(client, "buyer")
    other = _register(client, "other")
    camera = _list_product(client, seller)
    client.post(f"/cart/items?user_id={buyer}", json={"product_id": camera, "quantity": 1})
    order_id = client.post(f"/orders/?user_id={buyer}").json()["id"]

    assert client.get(f"/orders/{order_id}?user_id={other}").status_code == 404
    assert client.put(f"/orders/{order_id}/status?user_id={other}", json={"status": "cancelled"}).status_code == 404
    assert client.put(f"/orders/{order_id}/status?user_id={buyer}", json={"status": "cancelled"}).status_code == 404
    assert client.put(f"/orders/{order_id}/status?user_id={seller}", json={"status": "lost"}).status_code == 422


def test_duplicate_registration(client):
    _register(client, "ana")
    response = client.post("/users/", json={"email": "ana@example.com", "username": "ana2"})
    assert response.status_code == 409


def test_product_delete_with_history_conflicts(client):
    seller = _register(client, "seller")
    buyer = _register(client, "buyer")
    camera = _list_product(client, seller)
    client.post(f"/cart/items?user_id={buyer}", json={"product_id": camera, "quantity": 1})
    client.post(f"/orders/?user_id={buyer}")

    assert client.delete(f"/products/{camera}?user_id={buyer}").status_code == 404
    assert client.delete(f"/products/{camera}?user_id={seller}").status_code == 409


def test_profile_and_my_products(client):
    seller = _register(client, "seller")
    _register(client, "taken")
    camera = _list_product(client, seller)
    _list_product(client, seller, "Tripod", "15.00")
    client.put(f"/products/{camera}?user_id={seller}", json={"is_available": False})

    profile = client.get(f"/users/profile?user_id={seller}").json()
    assert profile["username"] == "seller"
    assert profile["address"] is None

    response = client.put(f"/users/profile?user_id={seller}", json={"address": "7 Harbour Way"})
    assert response.status_code == 200
    assert response.json()["address"] == "7 Harbour Way"
    assert client.put(f"/users/profile?user_id={seller}", json={"username": "taken"}).status_code == 409
    assert client.get("/users/profile?user_id=999").status_code == 404

    mine = client.get(f"/users/my-products?user_id={seller}").json()
    assert [p["title"] for p in mine["products"]] == ["Tripod", "Camera"]
    assert mine["products"][1]["is_available"] is False
