"""
Tests for the /customers endpoints, including the
"save appointment, then create customer" linking flow.
"""

from conftest import appointment_form, customer_form


def create_customer(client, **kwargs):
    return client.post("/customers", json=customer_form(**kwargs))


class TestCreateCustomer:
    def test_create_trims_and_normalises(self, client):
        response = create_customer(
            client, lastName="  Schmidt ", email="Max.Schmidt@Example.DE", zip=" 01067 "
        )

        assert response.status_code == 201
        customer = response.json()["customer"]
        assert customer["lastName"] == "Schmidt"
        assert customer["email"] == "max.schmidt@example.de"
        assert customer["zip"] == "01067"
        assert customer["website"] is None
        assert response.json()["linkedAppointmentId"] is None

    def test_required_fields_reported(self, client):
        response = client.post("/customers", json={"firstName": "Anna", "mobile": "0170 1"})

        assert response.status_code == 422
        errors = response.json()["errors"]
        assert set(errors) == {"lastName", "street", "zip", "city", "phone", "email"}

    def test_format_errors(self, client):
        response = create_customer(client, zip="10A15", email="not-an-email", birthDate="12.04.1985")

        assert response.status_code == 422
        assert set(response.json()["errors"]) == {"zip", "email", "birthDate"}

    def test_links_appointment(self, client):
        appointment = client.post("/appointments", json=appointment_form()).json()

        response = create_customer(client, appointmentId=appointment["id"])

        assert response.status_code == 201
        body = response.json()
        assert body["linkedAppointmentId"] == appointment["id"]
        linked = client.get(f"/appointments/{appointment['id']}").json()
        assert linked["customerId"] == body["customer"]["id"]

    def test_link_failure_keeps_customer(self, client):
        response = create_customer(client, appointmentId=404)

        assert response.status_code == 201
        body = response.json()
        assert body["linkError"]
        assert client.get(f"/customers/{body['customer']['id']}").status_code == 200


class TestCustomerCrud:
    def test_update_replaces_fields(self, client):
        customer = create_customer(client).json()["customer"]

        response = client.put(
            f"/customers/{customer['id']}", json=customer_form(city="Hamburg", mobile="")
        )

        assert response.status_code == 200
        assert response.json()["city"] == "Hamburg"
        assert response.json()["mobile"] is None

    def test_update_validates(self, client):
        customer = create_customer(client).json()["customer"]
        response = client.put(f"/customers/{customer['id']}", json=customer_form(lastName=""))
        assert response.status_code == 422

    def test_delete_unlinks_appointments(self, client):
        appointment = client.post("/appointments", json=appointment_form()).json()
        customer = create_customer(client, appointmentId=appointment["id"]).json()["customer"]

        assert client.delete(f"/customers/{customer['id']}").status_code == 200
        assert client.get(f"/customers/{customer['id']}").status_code == 404
        assert client.get(f"/appointments/{appointment['id']}").json()["customerId"] is None

    def test_link_via_appointment_endpoint(self, client):
        appointment = client.post("/appointments", json=appointment_form()).json()
        customer = create_customer(client).json()["customer"]

        response = client.post(
            f"/appointments/{appointment['id']}/customer", json={"customerId": customer["id"]}
        )

        assert response.status_code == 200
        assert response.json()["customerId"] == customer["id"]

    def test_list_sorted_by_name(self, client):
        create_customer(client, lastName="Zimmer", firstName="Eva")
        create_customer(client, lastName="Ärger", firstName="Bob")
        create_customer(client, lastName="Becker", firstName="Carl")

        names = [c["lastName"] for c in client.get("/customers").json()]

        assert names == ["Ärger", "Becker", "Zimmer"]


class TestCustomerSearch:
    def test_blank_query_returns_nothing(self, client):
        create_customer(client)
        assert client.get("/customers/search", params={"query": "   "}).json() == []

    def test_matches_first_or_last_name_case_insensitively(self, client):
        create_customer(client, lastName="Müller", firstName="Anna")
        create_customer(client, lastName="Anderson", firstName="Lena")
        create_customer(client, lastName="Weber", firstName="Tom")

        results = client.get("/customers/search", params={"query": "AN"}).json()

        assert [(c["lastName"], c["firstName"]) for c in results] == [
            ("Anderson", "Lena"),
            ("Müller", "Anna"),
        ]

    def test_no_match(self, client):
        create_customer(client)
        assert client.get("/customers/search", params={"query": "xyz"}).json() == []
