from rest_framework import serializers
from .models import Country


class CountrySerializer(serializers.ModelSerializer):
    class Meta:
        model = Country
        fields = [
            'id', 'name', 'capital', 'region', 'population',
            'currency_code', 'exchange_rate', 'estimated_gdp',
            'flag_url', 'last_refreshed_at', 'created_at'
        ]
        read_only_fields = ['id', 'last_refreshed_at', 'created_at']

    def validate(self, data):
        """
        Validation rules for a reconciled Country:
        - name and population are required, population is never negative
        - currency_code may be null
        - exchange_rate, when present, is positive
        - without an exchange_rate the estimated_gdp is 0
        """
        errors = {}

        if not data.get("name"):
            errors["name"] = "is required"
        population = data.get("population")
        if population is None:
            errors["population"] = "is required"
        elif population < 0:
            errors["population"] = "must be a non-negative number"

        exchange_rate = data.get("exchange_rate")
        if exchange_rate is not None and exchange_rate <= 0:
            errors["exchange_rate"] = "must be positive"
        if exchange_rate is None and data.get("estimated_gdp"):
            errors["estimated_gdp"] = "must be 0 when there is no exchange rate"

        if errors:
            raise serializers.ValidationError({
                "error": "Validation failed",
                "details": errors
            })

        return data


class StatusSerializer(serializers.Serializer):
    total_countries = serializers.IntegerField()
    last_refreshed_at = serializers.DateTimeField(allow_null=True)


class RefreshSerializer(StatusSerializer):
    message = serializers.CharField()
    refreshed = serializers.IntegerField()
    failed = serializers.IntegerField()
    duration_seconds = serializers.FloatField()
