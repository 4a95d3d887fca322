def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Salon Booking API is running"}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_errors_use_the_envelope(client):
    response = client.get("/api/v1/formulas/999")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Formula not found or inactive."}
