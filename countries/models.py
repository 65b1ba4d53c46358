from django.db import models
from django.utils import timezone


def normalize_name(name):
    return name.strip().lower()


class Country(models.Model):
    # id — auto-generated
    name = models.CharField(max_length=255)
    # name_key — lower-cased name, the unique lookup key
    name_key = models.CharField(max_length=255, unique=True, editable=False)
    capital = models.CharField(max_length=255, null=True, blank=True)
    region = models.CharField(max_length=100, null=True, blank=True, db_index=True)
    # population — required, missing/invalid values arrive as 0
    population = models.PositiveBigIntegerField(default=0)
    currency_code = models.CharField(max_length=10, null=True, blank=True, db_index=True)
    # exchange_rate — null when the currency has no rate
    exchange_rate = models.FloatField(null=True, blank=True)
    # estimated_gdp — computed; 0 when there is no rate to compute from
    estimated_gdp = models.FloatField(null=True, blank=True)
    flag_url = models.URLField(max_length=500, null=True, blank=True)
    # last_refreshed_at — bumped on every successful upsert of this record
    last_refreshed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        db_table = "countries"
        ordering = ["name_key"]
        verbose_name_plural = "countries"

    def save(self, *args, **kwargs):
        self.name_key = normalize_name(self.name)
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name


class Metadata(models.Model):
    """Process-wide scalars, one row per key."""
    LAST_REFRESHED_AT = "last_refreshed_at"

    key_name = models.CharField(max_length=100, unique=True)
    value = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "metadata"
        verbose_name_plural = "metadata"

    def __str__(self):
        return f"{self.key_name}={self.value}"


class RequestLog(models.Model):
    method = models.CharField(max_length=10)
    path = models.TextField()
    status_code = models.PositiveSmallIntegerField()
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True, default="")
    response_time_ms = models.FloatField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = "request_logs"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.method} {self.path} {self.status_code}"
