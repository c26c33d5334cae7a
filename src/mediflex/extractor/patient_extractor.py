"""
Patient Medicine Extractor
==========================
Prescription / patient slip: patient name and contact at the top, then
a medicine list below an "Medicine  Qty  Price" style header.

Patient name
  1. value of the first "Patient:" / "Name:" line
  2. else the first unclassified line before the list that is a
     plausible name and carries no digits
  3. else ""
"""

import re
from typing import List

from mediflex.extractor.base_extractor import BaseExtractor
from mediflex.extractor.fields import is_candidate_name
from mediflex.extractor.line_classifier import contact_value, patient_name
from mediflex.models import ClassifiedLine, LineCategory, Medicine, PatientRecipient


class PatientMedicineExtractor(BaseExtractor):

    patient_mode = True
    record_model = Medicine

    def _assemble(self, lines: List[str]) -> PatientRecipient:
        classified = self.classifier.classify(lines)
        return PatientRecipient(
            name=self._patient_name(classified),
            contact=self._contact(classified),
            medicines=self._records(classified, lines),
        )

    def _patient_name(self, classified: List[ClassifiedLine]) -> str:
        for line in classified:
            if line.category is LineCategory.PATIENT_META:
                name = patient_name(line.text)
                if name:
                    return name

        for line in classified:
            if line.category is LineCategory.LIST_HEADER:
                break
            if (
                line.category is LineCategory.UNCLASSIFIED
                and not re.search(r'\d', line.text)
                and is_candidate_name(line.text, self.name_min_length, self.name_max_length)
            ):
                return line.text
        return ""

    @staticmethod
    def _contact(classified: List[ClassifiedLine]):
        for line in classified:
            if line.category is LineCategory.CONTACT_META:
                value = contact_value(line.text)
                if value:
                    return value
        return None

    def _describe(self, result: PatientRecipient) -> str:
        return f"patient='{result.name}' medicines={len(result.medicines)}"
