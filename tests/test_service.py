"""Tests for the registry service."""

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from pet_registry.config import MediaConfig, RegistryConfig, StoreConfig
from pet_registry.exceptions import (
    ConfigurationError,
    InvalidTransitionError,
    NoMatchError,
    ProviderUnavailableError,
    RecordNotFoundError,
    UnauthorizedError,
    ValidationError,
)
from pet_registry.generators import PetReportGenerator, register_reports
from pet_registry.geo import destination, distance_km
from pet_registry.geocoding import GeocodeCandidate, GeocodingNormalizer, StaticGeocoder
from pet_registry.lifecycle import ALLOWED_TRANSITIONS
from pet_registry.media import LocalMediaStore
from pet_registry.models import GeoPoint, ImageRef, PetPatch, PetStatus, Species
from pet_registry.search import SearchCriteria
from pet_registry.service import RegistryService, build_service
from pet_registry.store import PetRecordStore

MOUNTAIN_VIEW = GeoPoint(longitude=-122.0841, latitude=37.4220)


def _register_point(geocoder: StaticGeocoder, address: str, point: GeoPoint, city: str = "Mountain View") -> None:
    geocoder.add(
        address,
        GeocodeCandidate(
            longitude=point.longitude,
            latitude=point.latitude,
            formatted_address=address,
            city=city,
        ),
    )


class TestReport:
    """Tests for RegistryService.report."""

    def test_rex_end_to_end(self, service, owner, other_identity, pet_data, addresses) -> None:
        """Report Rex, mark found, then reject a stranger's reunite."""
        record = service.report(owner, pet_data, addresses["mountain_view"])

        assert record.pet_id
        assert record.name == "Rex"
        assert record.species == Species.DOG
        assert record.status == PetStatus.MISSING
        assert record.owner == owner
        assert record.location == GeoPoint(longitude=-122.0841, latitude=37.4220)
        assert record.address.city == "Mountain View"
        assert record.address.raw == addresses["mountain_view"]

        found = service.update_status(owner, record.pet_id, "found")
        assert found.status == PetStatus.FOUND

        with pytest.raises(UnauthorizedError):
            service.update_status(other_identity, record.pet_id, "reunited")
        assert service.find(record.pet_id).status == PetStatus.FOUND

    def test_record_is_findable_and_searchable(self, service, owner, pet_data, addresses) -> None:
        record = service.report(owner, pet_data, addresses["mountain_view"])

        assert service.get_by_id(record.pet_id) == record
        assert service.search({"lat": 37.4220, "lng": -122.0841, "radius": 1}) == [record]
        assert service.search({"city": "mountain view"}) == [record]

    def test_images_are_kept_in_order(self, service, owner, pet_data, addresses) -> None:
        images = [
            {"url": "/uploads/a.jpg", "public_id": "a"},
            ImageRef(url="/uploads/b.jpg", media_id="b"),
        ]

        record = service.report(owner, pet_data, addresses["mountain_view"], images=images)

        assert [image.media_id for image in record.images] == ["a", "b"]

    def test_no_match_stores_nothing(self, service, store, owner, pet_data) -> None:
        with pytest.raises(NoMatchError):
            service.report(owner, pet_data, "Platform 9 3/4, Kings Cross")

        assert len(store) == 0

    def test_provider_unavailable_stores_nothing(self, store, owner, pet_data, addresses) -> None:
        geocoder = MagicMock()
        geocoder.geocode.side_effect = ProviderUnavailableError("quota exceeded")
        service = RegistryService(store=store, normalizer=GeocodingNormalizer(geocoder))

        with pytest.raises(ProviderUnavailableError):
            service.report(owner, pet_data, addresses["mountain_view"])

        assert len(store) == 0
        assert store.summary()["indexed_cells"] == 0

    def test_validation_happens_before_geocoding(self, service, geocoder, store, owner, pet_data, addresses) -> None:
        del pet_data["name"]

        with pytest.raises(ValidationError) as exc_info:
            service.report(owner, pet_data, addresses["mountain_view"])

        assert "Field 'name' is required" in exc_info.value.errors
        assert geocoder.calls == []
        assert len(store) == 0

    def test_empty_address(self, service, owner, pet_data) -> None:
        with pytest.raises(ValidationError, match="Address is required"):
            service.report(owner, pet_data, "   ")

    @pytest.mark.parametrize("identity", ["", "   "])
    def test_requires_identity(self, service, store, geocoder, pet_data, addresses, identity) -> None:
        with pytest.raises(ValidationError, match="Owner identity is required"):
            service.report(identity, pet_data, addresses["mountain_view"])

        assert geocoder.calls == []
        assert len(store) == 0


class TestFind:
    """Tests for RegistryService.find."""

    def test_unknown_id(self, service) -> None:
        with pytest.raises(RecordNotFoundError):
            service.find("does-not-exist")


class TestUpdateStatus:
    """Tests for RegistryService.update_status."""

    @pytest.mark.parametrize(
        "path,target",
        [
            ([], PetStatus.MISSING),
            ([], PetStatus.FOUND),
            ([], PetStatus.REUNITED),
            ([PetStatus.FOUND], PetStatus.MISSING),
            ([PetStatus.FOUND], PetStatus.FOUND),
            ([PetStatus.FOUND], PetStatus.REUNITED),
            ([PetStatus.REUNITED], PetStatus.MISSING),
            ([PetStatus.REUNITED], PetStatus.FOUND),
            ([PetStatus.REUNITED], PetStatus.REUNITED),
        ],
    )
    def test_transition_grid(self, service, owner, pet_data, addresses, path, target) -> None:
        """Test every (current, target) pair through the service."""
        record = service.report(owner, pet_data, addresses["mountain_view"])
        for step in path:
            record = service.update_status(owner, record.pet_id, step)
        current = record.status

        if (current, target) in ALLOWED_TRANSITIONS:
            assert service.update_status(owner, record.pet_id, target).status == target
        else:
            with pytest.raises(InvalidTransitionError):
                service.update_status(owner, record.pet_id, target)
            assert service.find(record.pet_id).status == current

    def test_unknown_record(self, service, owner) -> None:
        with pytest.raises(RecordNotFoundError):
            service.update_status(owner, "nope", "found")

    def test_invalid_status_value(self, service, owner, pet_data, addresses) -> None:
        record = service.report(owner, pet_data, addresses["mountain_view"])

        with pytest.raises(ValidationError):
            service.update_status(owner, record.pet_id, "lost")

    @pytest.mark.parametrize("target", list(PetStatus))
    def test_non_owner_rejected(self, service, owner, other_identity, pet_data, addresses, target) -> None:
        record = service.report(owner, pet_data, addresses["mountain_view"])

        with pytest.raises(UnauthorizedError):
            service.update_status(other_identity, record.pet_id, target)
        assert service.find(record.pet_id) == record

    def test_status_change_moves_search_results(self, service, owner, pet_data, addresses) -> None:
        record = service.report(owner, pet_data, addresses["mountain_view"])

        service.update_status(owner, record.pet_id, PetStatus.FOUND)

        assert service.search({"status": "missing"}) == []
        assert [r.pet_id for r in service.search({"status": "found"})] == [record.pet_id]


class TestUpdateFields:
    """Tests for RegistryService.update_fields."""

    def test_updates_mutable_fields(self, service, owner, pet_data, addresses) -> None:
        record = service.report(owner, pet_data, addresses["mountain_view"])

        updated = service.update_fields(owner, record.pet_id, {"description": "Found near the park", "reward": "250"})

        assert updated.description == "Found near the park"
        assert str(updated.reward) == "250"
        assert updated.owner == owner
        assert updated.location == record.location
        assert updated.created_at == record.created_at

    def test_accepts_patch_objects(self, service, owner, pet_data, addresses) -> None:
        record = service.report(owner, pet_data, addresses["mountain_view"])

        updated = service.update_fields(owner, record.pet_id, PetPatch(species=Species.CAT))

        assert updated.species == Species.CAT
        assert [r.pet_id for r in service.search({"species": "cat"})] == [record.pet_id]

    def test_non_owner_rejected(self, service, owner, other_identity, pet_data, addresses) -> None:
        record = service.report(owner, pet_data, addresses["mountain_view"])

        with pytest.raises(UnauthorizedError):
            service.update_fields(other_identity, record.pet_id, {"color": "White"})
        assert service.find(record.pet_id) == record

    @pytest.mark.parametrize("payload", [{"owner": "thief"}, {"createdAt": "2020-01-01"}, {"location": [0, 0]}])
    def test_immutable_fields_rejected(self, service, owner, pet_data, addresses, payload) -> None:
        record = service.report(owner, pet_data, addresses["mountain_view"])

        with pytest.raises(ValidationError):
            service.update_fields(owner, record.pet_id, payload)
        assert service.find(record.pet_id) == record

    def test_status_must_use_update_status(self, service, owner, pet_data, addresses) -> None:
        record = service.report(owner, pet_data, addresses["mountain_view"])

        with pytest.raises(ValidationError, match="update_status"):
            service.update_fields(owner, record.pet_id, {"status": "reunited"})

    def test_empty_patch(self, service, owner, pet_data, addresses) -> None:
        record = service.report(owner, pet_data, addresses["mountain_view"])

        with pytest.raises(ValidationError):
            service.update_fields(owner, record.pet_id, PetPatch())


class TestSearch:
    """Tests for RegistryService.search."""

    def test_spatial_matches_brute_force(self, service, geocoder, seed) -> None:
        """Test that a 10 km search returns exactly the records within 10 km."""
        generator = PetReportGenerator(center=MOUNTAIN_VIEW, spread_km=30.0, seed=seed)
        reports = list(generator.generate_batch(150))
        register_reports(geocoder, reports)
        for i, report in enumerate(reports):
            service.report(f"user-{i}", report.pet_data, report.raw_address)

        results = service.search(SearchCriteria(center=MOUNTAIN_VIEW, radius_km=10.0))

        expected = {
            record.pet_id
            for record in service.store.records()
            if distance_km(MOUNTAIN_VIEW, record.location) <= 10.0
        }
        assert expected
        assert {record.pet_id for record in results} == expected

    def test_boundary_included(self, service, geocoder, owner, pet_data) -> None:
        _register_point(geocoder, "edge", destination(MOUNTAIN_VIEW, 90.0, 10.0))
        _register_point(geocoder, "beyond", destination(MOUNTAIN_VIEW, 90.0, 10.01))
        edge = service.report(owner, pet_data, "edge")
        service.report(owner, pet_data, "beyond")

        results = service.search(SearchCriteria(center=MOUNTAIN_VIEW, radius_km=10.0))

        assert [record.pet_id for record in results] == [edge.pet_id]

    def test_filter_composition(self, service, geocoder, owner, pet_data, addresses) -> None:
        _register_point(geocoder, "near", destination(MOUNTAIN_VIEW, 45.0, 2.0))
        match = service.report(owner, pet_data, "near")
        service.report(owner, {**pet_data, "species": "cat"}, "near")
        found = service.report(owner, pet_data, "near")
        service.update_status(owner, found.pet_id, "found")
        service.report(owner, pet_data, addresses["san_francisco"])

        results = service.search({"species": "dog", "status": "missing", "lat": 37.4220, "lng": -122.0841, "radius": 5})

        assert [record.pet_id for record in results] == [match.pet_id]

    def test_radius_without_center_is_ignored(self, service, owner, pet_data, addresses) -> None:
        for key in ("mountain_view", "palo_alto", "san_francisco"):
            service.report(owner, pet_data, addresses[key])

        assert service.search({"radius": 5}) == service.search({})
        assert service.search(SearchCriteria(radius_km=5.0)) == service.search()
        assert len(service.search({})) == 3

    def test_spatial_ignores_city(self, service, owner, pet_data, addresses) -> None:
        palo_alto = service.report(owner, pet_data, addresses["palo_alto"])

        results = service.search({"city": "San Francisco", "lat": 37.4220, "lng": -122.0841, "radius": 10})

        assert [record.pet_id for record in results] == [palo_alto.pet_id]

    def test_city_search(self, service, owner, pet_data, addresses) -> None:
        service.report(owner, pet_data, addresses["mountain_view"])
        palo_alto = service.report(owner, pet_data, addresses["palo_alto"])

        results = service.search({"city": "PALO alto"})

        assert [record.pet_id for record in results] == [palo_alto.pet_id]

    def test_sort_by_distance(self, service, owner, pet_data, addresses) -> None:
        palo_alto = service.report(owner, pet_data, addresses["palo_alto"])
        mountain_view = service.report(owner, pet_data, addresses["mountain_view"])
        san_francisco = service.report(owner, pet_data, addresses["san_francisco"])

        results = service.search({"lat": 37.4220, "lng": -122.0841, "radius": 100, "sort": "distance"})

        assert [r.pet_id for r in results] == [mountain_view.pet_id, palo_alto.pet_id, san_francisco.pet_id]

    def test_negative_radius_rejected(self, service) -> None:
        with pytest.raises(ValidationError):
            service.search({"lat": 37.4, "lng": -122.0, "radius": -1})


class TestUploadImages:
    """Tests for RegistryService.upload_images."""

    def test_stores_in_order(self, store, geocoder, tmp_path: Path) -> None:
        service = RegistryService(
            store=store,
            normalizer=GeocodingNormalizer(geocoder),
            media_store=LocalMediaStore(tmp_path),
        )

        refs = service.upload_images([b"first", ("photo.png", b"second")])

        assert len(refs) == 2
        assert refs[0].url.endswith(".jpg")
        assert refs[1].url.endswith(".png")
        assert (tmp_path / f"{refs[1].media_id}.png").read_bytes() == b"second"

    def test_too_many(self, store, geocoder, tmp_path: Path) -> None:
        service = RegistryService(
            store=store,
            normalizer=GeocodingNormalizer(geocoder),
            media_store=LocalMediaStore(tmp_path),
            max_images=2,
        )

        with pytest.raises(ValidationError, match="At most 2 images"):
            service.upload_images([b"a", b"b", b"c"])
        assert list(tmp_path.iterdir()) == []

    def test_no_media_store(self, service) -> None:
        with pytest.raises(ConfigurationError):
            service.upload_images([b"a"])


class TestHealth:
    """Tests for RegistryService.health."""

    def test_health(self, store, geocoder, owner, pet_data, addresses) -> None:
        fixed = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        service = RegistryService(store=store, normalizer=GeocodingNormalizer(geocoder), clock=lambda: fixed)
        pet_data["last_seen"] = "2024-05-30T10:00:00Z"
        service.report(owner, pet_data, addresses["mountain_view"])

        health = service.health()

        assert health["status"] == "OK"
        assert health["timestamp"] == "2024-06-01T12:00:00+00:00"
        assert health["records"]["total"] == 1
        assert health["records"]["missing"] == 1


class TestBuildService:
    """Tests for build_service."""

    def test_wires_components(self, geocoder, tmp_path: Path) -> None:
        config = RegistryConfig(
            media=MediaConfig(upload_dir=tmp_path / "uploads", max_images=3),
            store=StoreConfig(snapshot_path=tmp_path / "registry.json"),
        )
        config.search.max_radius_km = 20.0

        service = build_service(config, geocoder=geocoder)

        assert service.planner.max_radius_km == 20.0
        assert service.max_images == 3
        assert isinstance(service.media_store, LocalMediaStore)
        assert (tmp_path / "uploads").is_dir()

    def test_snapshot_round_trip(self, geocoder, owner, pet_data, addresses, tmp_path: Path) -> None:
        config = RegistryConfig(
            media=MediaConfig(upload_dir=tmp_path / "uploads"),
            store=StoreConfig(snapshot_path=tmp_path / "registry.json"),
        )

        service = build_service(config, geocoder=geocoder)
        with service.store:
            record = service.report(owner, pet_data, addresses["mountain_view"])

        reopened = build_service(config, geocoder=geocoder)
        with reopened.store:
            assert reopened.find(record.pet_id) == record
            assert reopened.search({"lat": 37.4220, "lng": -122.0841, "radius": 1}) == [record]

    def test_uses_given_store(self, geocoder, tmp_path: Path) -> None:
        store = PetRecordStore()
        config = RegistryConfig(media=MediaConfig(upload_dir=tmp_path))

        assert build_service(config, geocoder=geocoder, store=store).store is store

    def test_invalid_config(self, geocoder) -> None:
        config = RegistryConfig()
        config.search.max_radius_km = 0

        with pytest.raises(ConfigurationError):
            build_service(config, geocoder=geocoder)
