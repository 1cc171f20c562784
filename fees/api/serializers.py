from rest_framework import serializers

from fees.models import Payment
from fees.services.payment_validator import INITIATION_CHANNELS, MAX_AMOUNT


class RecordPaymentSerializer(serializers.Serializer):
    matricNumber = serializers.CharField(required=False, allow_blank=True, max_length=32)
    transactionId = serializers.CharField(required=False, allow_blank=True, max_length=128)
    reference = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=64)
    amount = serializers.IntegerField(required=False, allow_null=True)
    status = serializers.ChoiceField(choices=Payment.Status.choices, required=False)


class InitiatePaymentSerializer(serializers.Serializer):
    matricNumber = serializers.CharField(required=False, allow_blank=True, max_length=32)
    firstName = serializers.CharField(required=False, allow_blank=True, max_length=100)
    lastName = serializers.CharField(required=False, allow_blank=True, max_length=100)
    email = serializers.EmailField(required=False, allow_blank=True)
    amount = serializers.IntegerField(required=False, allow_null=True)
    phoneNumber = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=20)
    channel = serializers.ChoiceField(choices=INITIATION_CHANNELS, required=False)


class RegistrationSerializer(serializers.Serializer):
    matricNumber = serializers.CharField(required=False, allow_blank=True, max_length=32)
    firstName = serializers.CharField(required=False, allow_blank=True, max_length=100)
    lastName = serializers.CharField(required=False, allow_blank=True, max_length=100)
    email = serializers.EmailField(required=False, allow_blank=True)
    phoneNumber = serializers.CharField(required=False, allow_blank=True, max_length=20)
    faculty = serializers.CharField(required=False, allow_blank=True, max_length=100)
    department = serializers.CharField(required=False, allow_blank=True, max_length=100)
    level = serializers.CharField(required=False, allow_blank=True, max_length=10)
    dateOfBirth = serializers.DateField(required=False, allow_null=True)
    gender = serializers.CharField(required=False, allow_blank=True, max_length=20)
    stateOfOrigin = serializers.CharField(required=False, allow_blank=True, max_length=50)
    address = serializers.CharField(required=False, allow_blank=True)
    emergencyContact = serializers.CharField(required=False, allow_blank=True, max_length=20)
    emergencyContactName = serializers.CharField(required=False, allow_blank=True, max_length=100)
    emergencyContactRelationship = serializers.CharField(required=False, allow_blank=True, max_length=50)
    reference = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=64)
    paidAmount = serializers.IntegerField(required=False, allow_null=True, min_value=0, max_value=MAX_AMOUNT)


# request key -> Student field
PROFILE_KEYS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "phoneNumber": "phone_number",
    "faculty": "faculty",
    "department": "department",
    "level": "level",
    "dateOfBirth": "date_of_birth",
    "gender": "gender",
    "stateOfOrigin": "state_of_origin",
    "address": "address",
    "emergencyContact": "emergency_contact",
    "emergencyContactName": "emergency_contact_name",
    "emergencyContactRelationship": "emergency_contact_relationship",
}
