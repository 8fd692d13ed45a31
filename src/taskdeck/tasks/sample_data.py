# src/taskdeck/tasks/sample_data.py

"""Demo categories and tasks offered by the "load sample data" action."""

from __future__ import annotations

from .task_models import Contact, SubTask, Task, TaskMetadata, utc_now

# (sample id, name, color); sample tasks point at the sample ids.
SAMPLE_CATEGORIES: list[tuple[str, str, str]] = [
    ("cat-1", "Business Setup", "#4F46E5"),
    ("cat-2", "Compliance", "#10B981"),
    ("cat-3", "Finance", "#F59E0B"),
]


def _subs(*items: tuple[str, str, bool]) -> list[SubTask]:
    return [SubTask(description=d, timeline=t, completed=c) for d, t, c in items]


def sample_tasks() -> list[Task]:
    now = utc_now()
    return [
        Task(
            id="task-1",
            title="Register Private Limited Company",
            description=(
                "Complete all steps required to register a new private limited company "
                "with the Office of Company Registrar."
            ),
            category_id="cat-1",
            sub_tasks=_subs(
                ("Reserve company name", "1-2 days", True),
                ("Prepare Memorandum of Association", "3-4 days", True),
                ("Prepare Articles of Association", "3-4 days", False),
                ("Submit documents to Company Registrar", "1 day", False),
                ("Receive Certificate of Incorporation", "7-10 days", False),
            ),
            metadata=TaskMetadata(
                contact=Contact(
                    name="Office of Company Registrar",
                    email="info@ocr.gov.np",
                    phone="+977-1-4215156",
                ),
                cost="50,000 NPR",
                timeline="3-4 weeks",
                documents_needed=[
                    "Memorandum of Association",
                    "Articles of Association",
                    "Director Identification Documents",
                    "Proof of Registered Office Address",
                ],
                contingencies="If company name is unavailable, have 3 alternative names ready.",
                progress_note="Name reserved, Documents being drafted",
            ),
            created_at=now,
            updated_at=now,
        ),
        Task(
            id="task-2",
            title="Obtain Tax Registration Certificate",
            description=(
                "Register with the tax authorities and obtain Permanent Account Number (PAN) "
                "for the company."
            ),
            category_id="cat-2",
            sub_tasks=_subs(
                ("Prepare application for PAN registration", "1 day", True),
                ("Submit application to Inland Revenue Department", "1 day", False),
                ("Receive PAN certificate", "3-5 days", False),
            ),
            metadata=TaskMetadata(
                contact=Contact(
                    name="Inland Revenue Department",
                    email="info@ird.gov.np",
                    phone="+977-1-4415802",
                ),
                cost="10,000 NPR",
                timeline="1-2 weeks",
                documents_needed=[
                    "Certificate of Incorporation",
                    "Company Registration Certificate",
                    "Director Identification Documents",
                ],
                contingencies="May need to visit office in person if online application has issues.",
            ),
            created_at=now,
            updated_at=now,
        ),
        Task(
            id="task-3",
            title="Open Business Bank Account",
            description="Open a corporate bank account for the newly registered company.",
            category_id="cat-3",
            sub_tasks=_subs(
                ("Research banks and compare offerings", "2-3 days", True),
                ("Prepare required documents", "1 day", True),
                ("Schedule appointment with bank", "1 day", True),
                ("Meet with bank representative", "1 day", False),
                ("Receive account details and banking kit", "3-5 days", False),
            ),
            metadata=TaskMetadata(
                contact=Contact(
                    name="Nepal Investment Bank",
                    email="corporate@nib.com.np",
                    phone="+977-1-4228229",
                ),
                cost="5,000 NPR (minimum deposit: 50,000 NPR)",
                timeline="1-2 weeks",
                documents_needed=[
                    "Certificate of Incorporation",
                    "PAN Certificate",
                    "Board Resolution for Bank Account Opening",
                    "Director Identification Documents",
                    "Company Seal",
                ],
                contingencies=(
                    "Have alternative bank options if first choice has high fees or requirements."
                ),
            ),
            created_at=now,
            updated_at=now,
        ),
    ]
