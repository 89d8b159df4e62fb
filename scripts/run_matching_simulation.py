import logging
import os
import time
from typing import List

import pandas as pd

from dispatch.dispatcher import Dispatcher
from drivers.models import DriverTrip
from riders.models import RiderRequest
from routing.geo import GeoPoint
from routing.polyline import decode_polyline
from trips.memory import InMemoryTripStore


def load_driver_trips(filepath="mock_driver_trips.csv") -> List[DriverTrip]:
    df = pd.read_csv(filepath)
    trips = []
    for row in df.itertuples(index=False):
        trips.append(
            DriverTrip.new(
                trip_id=row.trip_id,
                driver_id=row.driver_id,
                departure=(row.departure_lat, row.departure_lng),
                destination=(row.destination_lat, row.destination_lng),
                departure_time=int(row.departure_time),
                available_seats=int(row.available_seats),
                total_seats=int(row.total_seats),
                route=[(point.lat, point.lng) for point in decode_polyline(row.route_polyline)],
                status=row.status,
                driver_rating=float(row.driver_rating),
                route_distance_km=float(row.route_distance_km),
            )
        )
    return trips


def load_rider_requests(filepath="mock_rider_requests.csv", limit=None) -> List[RiderRequest]:
    df = pd.read_csv(filepath)
    if limit:
        df = df.head(limit)
    return [
        RiderRequest(
            id=row.request_id,
            rider_id=row.rider_id,
            pickup=GeoPoint(row.pickup_lat, row.pickup_lng),
            dropoff=GeoPoint(row.dropoff_lat, row.dropoff_lng),
            earliest_departure=int(row.earliest_departure),
            latest_departure=int(row.latest_departure),
            seats_needed=int(row.seats_needed),
        )
        for row in df.itertuples(index=False)
    ]


def run_simulation(drivers_file="mock_driver_trips.csv", riders_file="mock_rider_requests.csv"):
    print("=== STARTING END-TO-END MATCHING SIMULATION ===")

    # 1. Load Data
    trips = load_driver_trips(drivers_file)
    riders = load_rider_requests(riders_file)
    print(f"Loaded {len(trips)} Driver Trips and {len(riders)} Rider Requests.\n")

    # 2. Store trips the way the database would (bbox + encoded polyline)
    store = InMemoryTripStore()
    for trip in trips:
        store.save_driver_trip(trip)

    # 3. One dispatch cycle over every pending request
    dispatcher = Dispatcher(trip_store=store, config_store=store)
    start_time = time.time()
    result = dispatcher.run_cycle(riders)
    print(f"Dispatch cycle finished in {time.time() - start_time:.2f}s.\n")

    # 4. Report
    rows = []
    for rider_id, assignment in result.assignments.items():
        pool = assignment.pool
        rows.append({
            "rider_id": rider_id,
            "request_id": assignment.match.rider_request_id,
            "driver_trip_id": pool.driver_trip_id,
            "score": round(assignment.match.score, 4),
            "pool_size": len(pool.riders),
            "pool_detour_km": round(pool.cumulative_detour_km, 2),
            "carbon_saved_kg": assignment.match.carbon_saved_kg,
            "explanation": assignment.match.explanation,
        })

    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    output_path = os.path.join(base_dir, "matching_results.csv")
    pd.DataFrame(rows).to_csv(output_path, index=False)

    rejections = pd.Series(
        [reason for outcome in result.outcomes.values() for reason, count in outcome.stats.rejections.items() for _ in range(count)],
        dtype="object",
    )

    print("=== SIMULATION COMPLETE ===")
    print(f"Riders Assigned: {len(result.assignments)} / {len(result.outcomes)}")
    print(f"Unassigned Requests: {len(result.unassigned_request_ids)}")
    if not rejections.empty:
        print("\nTop rejection reasons:")
        for reason, count in rejections.value_counts().head(5).items():
            print(f"  {reason}: {count}")
    print(f"\nResults written to '{output_path}'.")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_simulation()
