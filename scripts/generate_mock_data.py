import numpy as np
import pandas as pd
from datetime import datetime, timezone

from routing.geo import GeoPoint, polyline_length
from routing.polyline import encode_polyline


def _mock_route(start, end, points=12, jitter_deg=0.002):
    """Straight line with a little sideways wobble, endpoints kept exact."""
    lats = np.linspace(start[0], end[0], points)
    lngs = np.linspace(start[1], end[1], points)
    lats[1:-1] += np.random.uniform(-jitter_deg, jitter_deg, points - 2)
    lngs[1:-1] += np.random.uniform(-jitter_deg, jitter_deg, points - 2)
    return [GeoPoint(float(lat), float(lng)) for lat, lng in zip(lats, lngs)]


def generate_mock_trips_and_riders(
    num_drivers=60,
    num_riders=150,
    drivers_file="mock_driver_trips.csv",
    riders_file="mock_rider_requests.csv",
):
    """
    Generates commuter-style driver trips and rider requests around Johannesburg.
    Drivers head from the suburbs towards a handful of business hubs; riders
    are placed near a random driver's route so pooling opportunities exist.
    """
    CENTER_LAT = -26.2041
    CENTER_LNG = 28.0473

    # Business hubs (Sandton, Rosebank, Braamfontein, Midrand-ish)
    hubs = [(-26.1076, 28.0567), (-26.1451, 28.0397), (-26.1929, 28.0305), (-26.0000, 28.1250)]

    now_ms = int(datetime.now(timezone.utc).timestamp() * 1000)

    trips = []
    routes = []
    for driver_index in range(num_drivers):
        # Start within ~15 km of the CBD, finish at a hub
        start = (CENTER_LAT + np.random.uniform(-0.12, 0.02), CENTER_LNG + np.random.uniform(-0.12, 0.12))
        end = hubs[np.random.randint(0, len(hubs))]
        route = _mock_route(start, end)
        routes.append(route)

        total_seats = int(np.random.choice([2, 3, 4], p=[0.2, 0.3, 0.5]))
        trips.append({
            "trip_id": f"t_{str(driver_index + 1).zfill(4)}",
            "driver_id": f"d_{np.random.randint(1000, 9999)}",
            "departure_lat": np.round(start[0], 6),
            "departure_lng": np.round(start[1], 6),
            "destination_lat": end[0],
            "destination_lng": end[1],
            "departure_time": now_ms + int(np.random.randint(0, 60)) * 60_000,
            "available_seats": int(np.random.randint(1, total_seats + 1)),
            "total_seats": total_seats,
            "route_polyline": encode_polyline(route),
            "route_distance_km": np.round(polyline_length(route), 3),
            "driver_rating": np.round(np.random.uniform(3.5, 5.0), 1),
            "status": np.random.choice(["offered", "active", "cancelled"], p=[0.8, 0.15, 0.05]),
        })

    riders = []
    for rider_index in range(num_riders):
        # Board near the first half of some driver's route, alight near the second half
        route = routes[np.random.randint(0, len(routes))]
        pickup = route[np.random.randint(0, len(route) // 2)]
        dropoff = route[np.random.randint(len(route) // 2, len(route))]
        earliest = now_ms + int(np.random.randint(-10, 50)) * 60_000

        riders.append({
            "request_id": f"r_{str(rider_index + 1).zfill(5)}",
            "rider_id": f"u_{str(rider_index + 1).zfill(5)}",
            "pickup_lat": np.round(pickup.lat + np.random.uniform(-0.006, 0.006), 6),
            "pickup_lng": np.round(pickup.lng + np.random.uniform(-0.006, 0.006), 6),
            "dropoff_lat": np.round(dropoff.lat + np.random.uniform(-0.006, 0.006), 6),
            "dropoff_lng": np.round(dropoff.lng + np.random.uniform(-0.006, 0.006), 6),
            "earliest_departure": earliest,
            "latest_departure": earliest + int(np.random.choice([15, 20, 30])) * 60_000,
            "seats_needed": int(np.random.choice([1, 2], p=[0.85, 0.15])),
        })

    trips_df = pd.DataFrame(trips)
    riders_df = pd.DataFrame(riders)
    trips_df.to_csv(drivers_file, index=False)
    riders_df.to_csv(riders_file, index=False)
    print(f"✅ Generated {num_drivers} driver trips -> '{drivers_file}' and {num_riders} rider requests -> '{riders_file}'")

    print("\nTrips per status:")
    for status, count in trips_df["status"].value_counts().items():
        print(f"  {status}: {count}")


if __name__ == "__main__":
    generate_mock_trips_and_riders()
