"""Background jobs for patient registration."""

import logging

from celery import shared_task

from labwise_backend.patients.models import Patient

logger = logging.getLogger(__name__)


@shared_task
def verify_insurance_eligibility(patient_id, policy_number):
    """Check a patient's coverage with the payer.

    The payer integration is simulated: a policy on file is reported
    eligible, anything else as not found.
    """
    patient = Patient.objects.filter(pk=patient_id).first()
    if patient is None:
        logger.warning('Eligibility check for unknown patient %s', patient_id)
        return {'patient_id': patient_id, 'policy_number': policy_number, 'status': 'PatientNotFound'}

    policies = {entry.get('policy_number') for entry in patient.insurance_info or []}
    result = 'Eligible' if policy_number in policies else 'PolicyNotFound'
    logger.info('Eligibility for patient %s policy %s: %s', patient.mrn, policy_number, result)
    return {'patient_id': patient_id, 'policy_number': policy_number, 'status': result}
