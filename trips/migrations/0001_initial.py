from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="DriverTripRecord",
            fields=[
                ("id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("driver_id", models.CharField(db_index=True, max_length=64)),
                ("departure_lat", models.FloatField()),
                ("departure_lng", models.FloatField()),
                ("destination_lat", models.FloatField()),
                ("destination_lng", models.FloatField()),
                ("shift_lat", models.FloatField(blank=True, null=True)),
                ("shift_lng", models.FloatField(blank=True, null=True)),
                ("departure_time", models.BigIntegerField(help_text="Planned departure, epoch milliseconds")),
                (
                    "arrival_time",
                    models.BigIntegerField(blank=True, help_text="Estimated arrival, epoch milliseconds", null=True),
                ),
                ("available_seats", models.PositiveSmallIntegerField(default=0)),
                ("total_seats", models.PositiveSmallIntegerField(default=0)),
                ("bbox_min_lat", models.FloatField(blank=True, null=True)),
                ("bbox_max_lat", models.FloatField(blank=True, null=True)),
                ("bbox_min_lng", models.FloatField(blank=True, null=True)),
                ("bbox_max_lng", models.FloatField(blank=True, null=True)),
                (
                    "route_polyline_encoded",
                    models.TextField(
                        blank=True,
                        help_text="Encoded polyline (precision 5); empty when the driver gave only endpoints",
                        null=True,
                    ),
                ),
                (
                    "simplified_polyline_encoded",
                    models.TextField(blank=True, default="", help_text="Route simplified at 100 m tolerance"),
                ),
                ("route_point_count", models.PositiveIntegerField(default=0)),
                ("route_distance_km", models.FloatField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("offered", "Offered"),
                            ("active", "Active"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                            ("expired", "Expired"),
                        ],
                        default="offered",
                        max_length=20,
                    ),
                ),
                ("driver_rating", models.FloatField(blank=True, null=True)),
                ("organization_id", models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "driver_trips",
                "indexes": [
                    models.Index(fields=["status", "departure_time"], name="trips_status_departure_idx"),
                    models.Index(
                        fields=["bbox_min_lat", "bbox_max_lat", "bbox_min_lng", "bbox_max_lng"],
                        name="trips_bbox_idx",
                    ),
                    models.Index(
                        fields=["status", "available_seats", "departure_time", "bbox_min_lat", "bbox_max_lat"],
                        name="trips_prefilter_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="MatchConfigRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("organization_id", models.CharField(max_length=64, unique=True)),
                ("config_json", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "matching_config",
            },
        ),
    ]
