from datetime import timedelta

from conftest import auth_headers, future
from domia.models import ACCOUNT_TYPE_COMPANY
from domia.models_mission import OFFER_IN_PROGRESS, JobOffer


def _client_payload(**overrides):
    payload = {
        "firstName": "Jeanne",
        "lastName": "Martin",
        "phone": "06 12 34 56 78",
        "address": "1 rue de Rivoli",
        "city": "Paris",
        "postalCode": "75001",
    }
    payload.update(overrides)
    return payload


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_requests_without_token_are_rejected(client):
    response = client.get("/clients")
    assert response.status_code in (401, 403)


def test_invalid_token_is_401(client):
    response = client.get("/clients", headers={"Authorization": "Bearer not.a.token"})
    assert response.status_code == 401


def test_create_client_is_geocoded(client, worker, geocoder):
    response = client.post("/clients", json=_client_payload(), headers=auth_headers(worker))

    assert response.status_code == 200
    body = response.json()
    assert body["latitude"] == 48.8606
    assert body["longitude"] == 2.3376
    assert body["geocodedAt"] is not None
    assert body["phone"] == "0612345678"
    assert geocoder.queries == ["1 rue de Rivoli, 75001 Paris, France"]


def test_unknown_address_leaves_coordinates_empty(client, worker):
    response = client.post(
        "/clients", json=_client_payload(address="2 impasse Inconnue"), headers=auth_headers(worker)
    )

    assert response.status_code == 200
    assert response.json()["latitude"] is None


def test_address_change_triggers_new_lookup(client, worker, geocoder):
    headers = auth_headers(worker)
    created = client.post("/clients", json=_client_payload(address="9 rue Perdue"), headers=headers).json()
    assert created["latitude"] is None

    renamed = client.patch(f"/clients/{created['id']}", json={"notes": "Digicode 42"}, headers=headers)
    assert renamed.json()["latitude"] is None
    assert len(geocoder.queries) == 1

    moved = client.patch(
        f"/clients/{created['id']}", json={"address": "10 avenue Foch", "postalCode": "75016"}, headers=headers
    )
    assert moved.json()["latitude"] == 48.8719
    assert geocoder.queries[-1] == "10 avenue Foch, 75016 Paris, France"


def test_manual_geocode_endpoint(client, worker, make_client):
    stored = make_client(worker)
    response = client.post(f"/clients/{stored.id}/geocode", headers=auth_headers(worker))
    assert response.json()["longitude"] == 2.3376


def test_clients_are_private(client, worker, make_user, make_client):
    stranger_client = make_client(make_user())
    response = client.get(f"/clients/{stranger_client.id}", headers=auth_headers(worker))

    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


def test_client_payload_validation(client, worker):
    response = client.post("/clients", json=_client_payload(phone="12"), headers=auth_headers(worker))
    assert response.status_code == 422


def test_appointment_lifecycle(client, worker, make_client):
    headers = auth_headers(worker)
    patient = make_client(worker)
    start = future(days=2, hour=10)

    created = client.post(
        "/appointments",
        json={
            "clientId": patient.id,
            "startTime": start.isoformat(),
            "endTime": (start + timedelta(minutes=45)).isoformat(),
            "serviceName": "Pansement",
        },
        headers=headers,
    )
    assert created.status_code == 200
    appointment = created.json()
    assert appointment["duration"] == 45
    assert appointment["status"] == "scheduled"

    listed = client.get(
        "/appointments",
        params={"start_date": start.date().isoformat(), "end_date": start.date().isoformat()},
        headers=headers,
    )
    assert [a["id"] for a in listed.json()] == [appointment["id"]]

    done = client.patch(f"/appointments/{appointment['id']}/status", json={"status": "completed"}, headers=headers)
    assert done.json()["status"] == "completed"
    assert done.json()["completedAt"] is not None

    assert client.delete(f"/appointments/{appointment['id']}", headers=headers).status_code == 200
    assert client.get(f"/appointments/{appointment['id']}", headers=headers).status_code == 404


def test_appointment_requires_end_after_start(client, worker, make_client):
    patient = make_client(worker)
    start = future(days=2)
    response = client.post(
        "/appointments",
        json={"clientId": patient.id, "startTime": start.isoformat(), "endTime": start.isoformat()},
        headers=auth_headers(worker),
    )
    assert response.status_code == 422


def test_optimize_endpoint(client, worker, make_client, make_appointment):
    a = make_appointment(worker, make_client(worker, 0.0, 0.0))
    b = make_appointment(worker, make_client(worker, 0.0, 1.0))
    c = make_appointment(worker, make_client(worker, 0.0, 2.0))

    response = client.post(
        "/tours/optimize",
        json={"appointmentIds": [c.id, a.id, b.id], "startLocation": {"lat": 0.0, "lon": -0.5}},
        headers=auth_headers(worker),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["optimizedOrder"] == [a.id, b.id, c.id]
    assert body["totalDistance"] > 0
    assert body["unlocatedAppointmentIds"] == []


def test_optimize_endpoint_errors(client, worker):
    headers = auth_headers(worker)
    assert client.post("/tours/optimize", json={"appointmentIds": []}, headers=headers).status_code == 422

    missing = client.post("/tours/optimize", json={"appointmentIds": [4242]}, headers=headers)
    assert missing.status_code == 404
    assert missing.json()["code"] == "not_found"


def test_tour_endpoints(client, worker):
    headers = auth_headers(worker)
    day = future(days=3)
    created = client.post(
        "/tours", json={"name": "Tuesday", "date": day.isoformat(), "optimizedOrder": [1, 2]}, headers=headers
    ).json()

    listed = client.get("/tours", params={"date": day.date().isoformat()}, headers=headers).json()
    assert [t["id"] for t in listed] == [created["id"]]

    started = client.patch(f"/tours/{created['id']}", json={"status": "in_progress"}, headers=headers).json()
    assert started["startedAt"] is not None


def _offer_payload(worker_id, start):
    return {
        "workerId": worker_id,
        "title": "Garde de nuit",
        "startDate": start.isoformat(),
        "endDate": (start + timedelta(hours=8)).isoformat(),
        "address": "10 avenue Foch",
        "city": "Paris",
        "postalCode": "75016",
        "serviceType": "garde",
        "compensation": 200,
    }


def test_offer_flow_over_http(client, db, company, worker):
    company_headers = auth_headers(company)
    worker_headers = auth_headers(worker)
    start = future(days=4, hour=20)

    created = client.post("/offers", json=_offer_payload(worker.id, start), headers=company_headers)
    assert created.status_code == 201
    offer_id = created.json()["id"]

    inbox = client.get("/offers", params={"status": "pending"}, headers=worker_headers).json()
    assert [o["id"] for o in inbox] == [offer_id]
    assert inbox[0]["issuer"]["name"] == "Soins Paris"

    accepted = client.post(f"/offers/{offer_id}/accept", headers=worker_headers)
    assert accepted.status_code == 200
    assert accepted.json()["offer"]["status"] == OFFER_IN_PROGRESS
    appointment_id = accepted.json()["appointmentId"]
    assert client.get(f"/appointments/{appointment_id}", headers=worker_headers).json()["price"] == 200

    again = client.post(f"/offers/{offer_id}/accept", headers=worker_headers)
    assert again.status_code == 409
    assert again.json()["code"] == "invalid_state"

    bad_hours = client.post(f"/offers/{offer_id}/complete", json={"hoursWorked": 0}, headers=worker_headers)
    assert bad_hours.status_code == 400
    assert bad_hours.json()["code"] == "invalid_input"

    hours = client.post(f"/offers/{offer_id}/complete", json={"hoursWorked": 8}, headers=worker_headers).json()
    assert hours["status"] == "pending_validation"

    blank = client.post(
        f"/offers/{offer_id}/validate-hours",
        json={"hoursId": hours["id"], "action": "reject", "rejectionNote": " "},
        headers=company_headers,
    )
    assert blank.status_code == 400

    validated = client.post(
        f"/offers/{offer_id}/validate-hours",
        json={"hoursId": hours["id"], "action": "validate"},
        headers=company_headers,
    )
    assert validated.json()["status"] == "validated"

    listed = client.get(f"/offers/{offer_id}/hours", headers=worker_headers).json()
    assert [h["status"] for h in listed] == ["validated"]
    assert client.get(f"/offers/{offer_id}", headers=company_headers).json()["status"] == "completed_validated"


def test_workers_cannot_create_offers(client, worker, make_user):
    other = make_user()
    response = client.post("/offers", json=_offer_payload(other.id, future(days=2)), headers=auth_headers(worker))
    assert response.status_code == 403


def test_expired_offers_are_reported_as_expired(client, db, company, worker, make_offer):
    past = future(days=-2)
    offer = make_offer(company, worker, start=past, hours=2)

    listed = client.get("/offers", headers=auth_headers(worker)).json()
    assert listed[0]["id"] == offer.id
    assert listed[0]["status"] == "expired"

    refused = client.post(f"/offers/{offer.id}/accept", headers=auth_headers(worker))
    assert refused.status_code == 410
    assert db.get(JobOffer, offer.id).status == "pending"


def test_decline_over_http(client, company, worker, make_offer):
    offer = make_offer(company, worker, start=future(days=2))
    response = client.post(f"/offers/{offer.id}/decline", headers=auth_headers(worker))

    assert response.status_code == 200
    assert response.json()["status"] == "declined"


def test_mission_creation_listing_and_hours(client, company, make_user):
    workers = [make_user(profession="aide_soignante") for _ in range(3)]
    start = future(days=5, hour=8)
    headers = auth_headers(company)

    created = client.post(
        "/missions",
        json={
            "title": "Renfort EHPAD",
            "startDate": start.isoformat(),
            "endDate": (start + timedelta(days=1, hours=2)).isoformat(),
            "address": "4 rue du Bac",
            "city": "Paris",
            "postalCode": "75007",
            "hourlyRate": 25,
            "numberOfPositions": 2,
            "workerIds": [w.id for w in workers] + [workers[0].id],
        },
        headers=headers,
    )
    assert created.status_code == 201
    body = created.json()
    assert body["offersCreated"] == 3
    # Two calendar days at 25 each
    assert body["compensation"] == 50

    first_offer = body["offers"][0]["id"]
    accepted = client.post(f"/offers/{first_offer}/accept", headers=auth_headers(workers[0]))
    assert accepted.status_code == 200

    missions = client.get("/missions", headers=headers).json()
    assert len(missions) == 1
    assert missions[0]["totalOffers"] == 3
    assert missions[0]["workersNotified"] == 3
    assert missions[0]["pendingCount"] == 2
    assert missions[0]["inProgressCount"] == 1

    client.post(f"/offers/{first_offer}/complete", json={"hoursWorked": 12}, headers=auth_headers(workers[0]))
    hours = client.get(
        "/missions/hours",
        params={
            "title": "Renfort EHPAD",
            "startDate": start.isoformat(),
            "endDate": (start + timedelta(days=1, hours=2)).isoformat(),
            "address": "4 rue du Bac",
        },
        headers=headers,
    ).json()
    assert [h["hoursWorked"] for h in hours["hours"]] == [12.0]


def test_mission_requires_positive_rate(client, company, worker):
    start = future(days=5)
    response = client.post(
        "/missions",
        json={
            "title": "Renfort",
            "startDate": start.isoformat(),
            "endDate": (start + timedelta(hours=4)).isoformat(),
            "address": "4 rue du Bac",
            "city": "Paris",
            "postalCode": "75007",
            "hourlyRate": 0,
            "workerIds": [worker.id],
        },
        headers=auth_headers(company),
    )
    assert response.status_code == 400
    assert response.json()["code"] == "invalid_input"


def test_missions_are_company_only(client, worker):
    assert client.get("/missions", headers=auth_headers(worker)).status_code == 403


def test_hours_must_be_a_real_number(client, company, worker, make_offer):
    offer = make_offer(company, worker, start=future(days=2), status=OFFER_IN_PROGRESS)
    response = client.post(f"/offers/{offer.id}/complete", json={"hoursWorked": True}, headers=auth_headers(worker))
    assert response.status_code == 422


def test_invoice_lines_default_to_appointment_price(client, worker, make_client, make_appointment):
    customer = make_client(worker, first_name="Jean", last_name="Dupont")
    visit = make_appointment(worker, customer, price=80.0, service_name="Pansement")
    headers = auth_headers(worker)

    response = client.post(
        "/invoices",
        json={
            "clientId": customer.id,
            "taxRate": 20,
            "items": [
                {"appointmentId": visit.id},
                {"description": "Frais de déplacement", "quantity": 2, "unitPrice": 7.5},
            ],
        },
        headers=headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["invoiceNumber"] == f"INV-{worker.id}-00001"
    assert body["clientName"] == "Jean Dupont"
    assert body["status"] == "draft"
    assert [(i["description"], i["unitPrice"], i["total"]) for i in body["items"]] == [
        ("Pansement", 80.0, 80.0),
        ("Frais de déplacement", 7.5, 15.0),
    ]
    assert body["items"][0]["appointmentId"] == visit.id
    assert (body["subtotal"], body["tax"], body["total"]) == (95.0, 19.0, 114.0)

    second = client.post(
        "/invoices",
        json={"clientId": customer.id, "items": [{"description": "Consultation", "unitPrice": 30}]},
        headers=headers,
    ).json()
    assert second["invoiceNumber"] == f"INV-{worker.id}-00002"
    assert second["total"] == 30.0


def test_invoice_listing_payment_and_deletion(client, worker, make_client):
    first = make_client(worker, first_name="Jean")
    other = make_client(worker, first_name="Paul")
    headers = auth_headers(worker)

    def _invoice(customer, price):
        return client.post(
            "/invoices",
            json={"clientId": customer.id, "items": [{"description": "Soins", "unitPrice": price}]},
            headers=headers,
        ).json()

    kept = _invoice(first, 40)
    _invoice(other, 55)

    assert len(client.get("/invoices", headers=headers).json()) == 2
    by_client = client.get("/invoices", params={"clientId": first.id}, headers=headers).json()
    assert [i["id"] for i in by_client] == [kept["id"]]

    paid = client.patch(
        f"/invoices/{kept['id']}",
        json={"status": "paid", "paymentMethod": "virement", "taxRate": 10},
        headers=headers,
    )
    assert paid.status_code == 200
    body = paid.json()
    assert body["status"] == "paid"
    assert body["paidAt"] is not None
    assert body["paymentMethod"] == "virement"
    assert (body["subtotal"], body["tax"], body["total"]) == (40.0, 4.0, 44.0)

    only_paid = client.get("/invoices", params={"status": "paid"}, headers=headers).json()
    assert [i["id"] for i in only_paid] == [kept["id"]]

    bad_status = client.patch(f"/invoices/{kept['id']}", json={"status": "lost"}, headers=headers)
    assert bad_status.status_code == 422

    assert client.delete(f"/invoices/{kept['id']}", headers=headers).status_code == 200
    assert client.get(f"/invoices/{kept['id']}", headers=headers).status_code == 404


def test_invoices_are_scoped_to_their_owner(client, worker, make_user, make_client, make_appointment):
    mine = make_client(worker)
    someone_else = make_client(worker, first_name="Paul")
    visit = make_appointment(worker, someone_else, price=60.0)
    headers = auth_headers(worker)

    wrong_client = client.post(
        "/invoices", json={"clientId": mine.id, "items": [{"appointmentId": visit.id}]}, headers=headers
    )
    assert wrong_client.status_code == 400

    unpriced = make_appointment(worker, mine)
    no_price = client.post(
        "/invoices", json={"clientId": mine.id, "items": [{"appointmentId": unpriced.id}]}, headers=headers
    )
    assert no_price.status_code == 400
    assert no_price.json()["code"] == "invalid_input"

    stranger = make_user()
    foreign = client.post(
        "/invoices",
        json={"clientId": mine.id, "items": [{"description": "Soins", "unitPrice": 10}]},
        headers=auth_headers(stranger),
    )
    assert foreign.status_code == 404

    created = client.post(
        "/invoices",
        json={"clientId": mine.id, "items": [{"description": "Soins", "unitPrice": 10}]},
        headers=headers,
    ).json()
    assert client.get(f"/invoices/{created['id']}", headers=auth_headers(stranger)).status_code == 404
    assert client.get("/invoices", headers=auth_headers(stranger)).json() == []


def test_client_with_invoices_cannot_be_deleted(client, worker, make_client):
    customer = make_client(worker)
    headers = auth_headers(worker)
    invoice = client.post(
        "/invoices",
        json={"clientId": customer.id, "items": [{"description": "Soins", "unitPrice": 25}]},
        headers=headers,
    ).json()

    refused = client.delete(f"/clients/{customer.id}", headers=headers)
    assert refused.status_code == 409
    assert refused.json()["code"] == "invalid_state"

    client.delete(f"/invoices/{invoice['id']}", headers=headers)
    assert client.delete(f"/clients/{customer.id}", headers=headers).status_code == 200


def test_worker_search_filters(client, company, make_user):
    paris_nurse = make_user(profession="infirmiere", city="Paris", postal_code="75011", last_name="Bernard")
    boulogne_nurse = make_user(
        profession="infirmiere", city="Boulogne-Billancourt", postal_code="92100", last_name="Durand"
    )
    paris_physio = make_user(profession="kinesitherapeute", city="Paris", postal_code="75015", last_name="Petit")
    make_user(ACCOUNT_TYPE_COMPANY, city="Paris")

    def _search(user=company, **params):
        response = client.get("/workers/search", params=params, headers=auth_headers(user))
        assert response.status_code == 200
        return {w["id"] for w in response.json()}

    assert _search() == {paris_nurse.id, boulogne_nurse.id, paris_physio.id}
    assert _search(profession="infirmiere") == {paris_nurse.id, boulogne_nurse.id}
    assert _search(city="paris") == {paris_nurse.id, paris_physio.id}
    assert _search(postalCode="92100") == {boulogne_nurse.id}
    assert _search(profession="infirmiere", city="Paris") == {paris_nurse.id}
    assert _search(city="%") == set()
    # The caller is never listed
    assert _search(user=paris_nurse, profession="infirmiere") == {boulogne_nurse.id}
