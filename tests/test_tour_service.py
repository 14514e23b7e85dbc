from datetime import date, timedelta

import pytest

from conftest import NOW
from domia.domain.tours.geo import Coordinate, distance_km, travel_time_minutes
from domia.domain.tours.schemas import TourCreate, TourUpdate
from domia.domain.tours.service import TourService
from domia.exceptions import InvalidInputError, NotFoundError


@pytest.fixture
def line_appointments(worker, make_client, make_appointment):
    """Three appointments whose clients sit on the equator at lon 0, 1 and 2"""
    a = make_appointment(worker, make_client(worker, 0.0, 0.0), minutes=30)
    b = make_appointment(worker, make_client(worker, 0.0, 1.0), minutes=45)
    c = make_appointment(worker, make_client(worker, 0.0, 2.0), minutes=60)
    return a, b, c


def test_optimize_orders_line_and_estimates(db, worker, line_appointments):
    a, b, c = line_appointments
    route = TourService(db, worker).optimize_route([a.id, c.id, b.id])

    assert route.optimized_order == [a.id, b.id, c.id]
    expected_km = distance_km(Coordinate(0, 0), Coordinate(0, 1)) + distance_km(
        Coordinate(0, 1), Coordinate(0, 2)
    )
    assert route.total_distance == round(expected_km, 2)
    assert route.estimated_duration == round(travel_time_minutes(expected_km) + 30 + 45 + 60)
    assert route.unlocated_stop_ids == []


def test_optimize_with_start_location(db, worker, line_appointments):
    a, b, c = line_appointments
    route = TourService(db, worker).optimize_route([a.id, b.id, c.id], start=Coordinate(0.0, 2.2))
    assert route.optimized_order == [c.id, b.id, a.id]


def test_optimize_without_any_coordinates_keeps_input_order(db, worker, make_client, make_appointment):
    first = make_appointment(worker, make_client(worker), minutes=20)
    second = make_appointment(worker, make_client(worker), minutes=40)

    route = TourService(db, worker).optimize_route([second.id, first.id])

    assert route.optimized_order == [second.id, first.id]
    assert route.total_distance == 0.0
    assert route.estimated_duration == 60
    assert sorted(route.unlocated_stop_ids) == sorted([first.id, second.id])


def test_unlocated_stops_are_reported_separately(db, worker, make_client, make_appointment, line_appointments):
    a, b, c = line_appointments
    lost = make_appointment(worker, make_client(worker), minutes=15)

    route = TourService(db, worker).optimize_route([lost.id, a.id, b.id, c.id])

    assert route.optimized_order == [a.id, b.id, c.id]
    assert route.unlocated_stop_ids == [lost.id]
    # Service time of the unlocated appointment still counts
    expected_km = distance_km(Coordinate(0, 0), Coordinate(0, 2))
    assert route.estimated_duration == round(travel_time_minutes(expected_km) + 30 + 45 + 60 + 15)


def test_optimize_requires_ids(db, worker):
    with pytest.raises(InvalidInputError):
        TourService(db, worker).optimize_route([])


def test_optimize_unknown_ids_is_not_found(db, worker):
    with pytest.raises(NotFoundError):
        TourService(db, worker).optimize_route([999, 1000])


def test_optimize_ignores_other_users_appointments(db, worker, make_user, make_client, make_appointment):
    other = make_user()
    theirs = make_appointment(other, make_client(other, 1.0, 1.0))

    with pytest.raises(NotFoundError):
        TourService(db, worker).optimize_route([theirs.id])


def test_optimize_is_read_only(db, worker, line_appointments):
    a, b, c = line_appointments
    TourService(db, worker).optimize_route([a.id, b.id, c.id])
    db.expire_all()
    assert [x.tour_id for x in (a, b, c)] == [None, None, None]


def test_tour_crud_and_status_stamps(db, worker):
    service = TourService(db, worker)
    tour = service.create_tour(
        TourCreate(name="Monday", date=NOW, optimizedOrder=[3, 1, 2], totalDistance=12.5, estimatedDuration=95)
    )
    assert tour.status == "draft"
    assert tour.optimized_order == [3, 1, 2]

    started = service.update_tour(tour.id, TourUpdate(status="in_progress"))
    assert started.started_at is not None
    assert started.completed_at is None

    done = service.update_tour(tour.id, TourUpdate(status="completed"))
    assert done.completed_at is not None

    assert service.delete_tour(tour.id) == {"message": "Tour deleted"}
    with pytest.raises(NotFoundError):
        service.get_tour(tour.id)


def test_tours_filtered_by_day(db, worker):
    service = TourService(db, worker)
    service.create_tour(TourCreate(name="today", date=NOW))
    service.create_tour(TourCreate(name="tomorrow", date=NOW + timedelta(days=1)))

    names = [t.name for t in service.get_tours(date(2030, 3, 5))]
    assert names == ["tomorrow"]
    assert len(service.get_tours()) == 2


def test_tour_status_must_be_known():
    with pytest.raises(ValueError):
        TourUpdate(status="flying")
