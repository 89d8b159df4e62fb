from typing import List, Optional

from django.db import models

from drivers.models import DriverTrip, DriverTripStatus
from routing.geo import BoundingBox, GeoPoint

STATUS_CHOICES = [(status.value, status.name.title()) for status in DriverTripStatus]


class DriverTripRecord(models.Model):
    """
    A driver's trip offer as stored.

    Geometry is fixed at creation: the bounding box columns and the encoded
    polyline are computed once and never re-routed. The bbox columns plus
    departure_time serve the candidate pre-filter, so keep the indexes in
    Meta in step with DriverTripRepository.find_candidates.
    """

    id = models.CharField(primary_key=True, max_length=64)
    driver_id = models.CharField(max_length=64, db_index=True)

    departure_lat = models.FloatField()
    departure_lng = models.FloatField()
    destination_lat = models.FloatField()
    destination_lng = models.FloatField()

    # Workplace / shift destination, used for shift alignment scoring
    shift_lat = models.FloatField(null=True, blank=True)
    shift_lng = models.FloatField(null=True, blank=True)

    departure_time = models.BigIntegerField(help_text="Planned departure, epoch milliseconds")
    arrival_time = models.BigIntegerField(null=True, blank=True, help_text="Estimated arrival, epoch milliseconds")

    available_seats = models.PositiveSmallIntegerField(default=0)
    total_seats = models.PositiveSmallIntegerField(default=0)

    bbox_min_lat = models.FloatField(null=True, blank=True)
    bbox_max_lat = models.FloatField(null=True, blank=True)
    bbox_min_lng = models.FloatField(null=True, blank=True)
    bbox_max_lng = models.FloatField(null=True, blank=True)

    route_polyline_encoded = models.TextField(
        null=True,
        blank=True,
        help_text="Encoded polyline (precision 5); empty when the driver gave only endpoints",
    )
    simplified_polyline_encoded = models.TextField(
        blank=True,
        default="",
        help_text="Route simplified at 100 m tolerance",
    )
    route_point_count = models.PositiveIntegerField(default=0)
    route_distance_km = models.FloatField(null=True, blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=DriverTripStatus.OFFERED.value)
    driver_rating = models.FloatField(null=True, blank=True)
    organization_id = models.CharField(max_length=64, null=True, blank=True, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "driver_trips"
        indexes = [
            models.Index(fields=["status", "departure_time"], name="trips_status_departure_idx"),
            models.Index(
                fields=["bbox_min_lat", "bbox_max_lat", "bbox_min_lng", "bbox_max_lng"],
                name="trips_bbox_idx",
            ),
            # mirrors the pre-filter: status, seats, time window, then bbox
            models.Index(
                fields=["status", "available_seats", "departure_time", "bbox_min_lat", "bbox_max_lat"],
                name="trips_prefilter_idx",
            ),
        ]

    def __str__(self):
        return f"Trip {self.id} ({self.status}): ({self.departure_lat}, {self.departure_lng}) -> ({self.destination_lat}, {self.destination_lng})"

    @property
    def bounding_box(self) -> Optional[BoundingBox]:
        if self.bbox_min_lat is None:
            return None
        return BoundingBox(self.bbox_min_lat, self.bbox_max_lat, self.bbox_min_lng, self.bbox_max_lng)

    def to_driver_trip(self, route: Optional[List[GeoPoint]] = None) -> DriverTrip:
        """Domain snapshot. The polyline is hydrated separately (cache or decode)."""
        shift = None
        if self.shift_lat is not None and self.shift_lng is not None:
            shift = GeoPoint(self.shift_lat, self.shift_lng)

        return DriverTrip(
            id=self.id,
            driver_id=self.driver_id,
            departure=GeoPoint(self.departure_lat, self.departure_lng),
            destination=GeoPoint(self.destination_lat, self.destination_lng),
            departure_time=self.departure_time,
            available_seats=self.available_seats,
            total_seats=self.total_seats,
            route_polyline=list(route or []),
            status=DriverTripStatus(self.status),
            shift_location=shift,
            arrival_time=self.arrival_time,
            bounding_box=self.bounding_box,
            route_distance_km=self.route_distance_km,
            driver_rating=self.driver_rating,
            organization_id=self.organization_id,
        )


class MatchConfigRecord(models.Model):
    """
    Per-organization overrides, stored as the partial nested mapping that
    matching.config.merge_config() lays over the defaults.
    """

    organization_id = models.CharField(max_length=64, unique=True)
    config_json = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "matching_config"

    def __str__(self):
        return f"Matching config for {self.organization_id}"
