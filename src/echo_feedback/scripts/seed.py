"""Populate the configured database with demo users, feedback and reports."""
from __future__ import annotations

import argparse
import random
import sys
from datetime import timedelta

from sqlalchemy.orm import Session

from echo_feedback.core.errors import EchoError
from echo_feedback.db.session import SessionLocal, create_tables
from echo_feedback.db.time import utcnow
from echo_feedback.models import Feedback, User
from echo_feedback.models.feedback import FEEDBACK_STATUS_FLAGGED
from echo_feedback.services import auth_service, feedback_service, user_service
from echo_feedback.services.moderation import ModerationService, ReportParty

DEMO_PASSWORD = "user@test"

DEMO_USERS = [
    ("Priya", "Sharma", "priya.sharma@example.com"),
    ("Rahul", "Patel", "rahul.patel@example.com"),
    ("Ananya", "Reddy", "ananya.reddy@example.com"),
    ("Arjun", "Kumar", "arjun.kumar@example.com"),
    ("Sneha", "Iyer", "sneha.iyer@example.com"),
    ("Vikram", "Singh", "vikram.singh@example.com"),
    ("Divya", "Nair", "divya.nair@example.com"),
    ("Rohan", "Deshmukh", "rohan.deshmukh@example.com"),
    ("Kavya", "Menon", "kavya.menon@example.com"),
    ("Aditya", "Gupta", "aditya.gupta@example.com"),
]

FEEDBACK_MESSAGES = [
    "The new dark mode is fantastic. Would love to see more customization options.",
    "Been using this for three months and the experience has been great. Clean, intuitive UI.",
    "Customer support responded within minutes when I had an issue. Very impressed!",
    "The mobile app crashes occasionally when uploading images. Otherwise, solid product.",
    "Pricing is a bit steep for individual users. A student plan would be great.",
    "Love the recent updates! The performance improvements are noticeable.",
    "The export feature doesn't work properly; the file always comes out corrupted.",
    "Exactly what I was looking for. Simple and gets the job done.",
    "Any updates on when API access will be available?",
    "The onboarding process was smooth and helpful. Great first impression!",
    "Notifications are too frequent. Please allow finer-grained settings.",
    "The search sometimes misses content that I know exists.",
    "Would love to see integration with Google Calendar.",
    "Loading times have improved significantly since the last update.",
    "Would give five stars if there was an offline mode.",
]

SPAM_MESSAGES = [
    "CLICK HERE FOR AMAZING DEALS!!! Limited time offer, visit sketchy-website.com NOW!!!",
    "This product is absolute garbage. Total waste of money and time. Complete scam!",
    "Check out my new crypto scheme! Guaranteed 500% returns in 30 days! Message me!",
]

REPORT_REASONS = ("spam", "offensive", "inappropriate")


def _party(user: User) -> ReportParty:
    return ReportParty(user_id=user.user_id, user_name=user.full_name, user_email=user.email)


def reset_demo_data(db: Session) -> int:
    """Delete every demo account together with its feedback and reports."""
    emails = [email for _, _, email in DEMO_USERS]
    removed = 0
    for user in db.query(User).filter(User.email.in_(emails)).all():
        user_service.delete_user(db, user.user_id, admin="seed")
        removed += 1
    return removed


def _post(db: Session, author: User, message: str, max_age_days: int, rng: random.Random) -> Feedback:
    feedback = feedback_service.create_feedback(
        db,
        user_id=author.user_id,
        user_name=author.full_name,
        user_email=author.email,
        message=message,
    )
    feedback.created_at = utcnow() - timedelta(seconds=rng.uniform(0, max_age_days * 86400))
    db.commit()
    return feedback


def seed(db: Session, rng: random.Random) -> dict[str, int]:
    """Create demo users, their feedback, some spam and the reports against it."""
    users = [
        auth_service.register_user(
            db, first_name=first, last_name=last, email=email, password=DEMO_PASSWORD
        )
        for first, last, email in DEMO_USERS
    ]
    for user in users:
        print(f"[seed] created user {user.full_name} ({user.user_id})")

    feedbacks = []
    for user in users:
        for _ in range(rng.randint(2, 4)):
            feedbacks.append(_post(db, user, rng.choice(FEEDBACK_MESSAGES), 30, rng))

    for feedback in feedbacks:
        likers = [user for user in users if user.user_id != feedback.user_id]
        for liker in rng.sample(likers, rng.randint(0, len(likers))):
            feedback_service.toggle_like(db, feedback.id, liker.user_id)

    report_count = 0
    for message in SPAM_MESSAGES:
        spammer = rng.choice(users)
        spam = _post(db, spammer, message, 7, rng)
        candidates = [user for user in users if user.user_id != spammer.user_id]
        for reporter in rng.sample(candidates, rng.randint(2, 4)):
            reason = rng.choice(REPORT_REASONS)
            report = ModerationService.record_report(
                db,
                feedback_id=spam.id,
                reported_by=_party(reporter),
                feedback_author=_party(spammer),
                reason=reason,
                details="This looks like spam content" if reason == "spam" else "Inappropriate content",
            )
            report_count += 1
            print(f"[seed] report {report.report_id} by {reporter.first_name} ({reason})")

    flagged = db.query(Feedback).filter(Feedback.status == FEEDBACK_STATUS_FLAGGED).count()
    return {
        "users": len(users),
        "feedback": len(feedbacks) + len(SPAM_MESSAGES),
        "reports": report_count,
        "flagged": flagged,
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the database with demo data")
    parser.add_argument(
        "--reset-only",
        action="store_true",
        help="Remove existing demo data without creating new records.",
    )
    parser.add_argument(
        "--random-seed",
        type=int,
        default=None,
        help="Seed for the random generator, for reproducible data.",
    )
    args = parser.parse_args()

    create_tables()
    db = SessionLocal()
    try:
        removed = reset_demo_data(db)
        print(f"[seed] removed {removed} existing demo users")
        if args.reset_only:
            return
        summary = seed(db, random.Random(args.random_seed))
    except EchoError as exc:
        print(f"[seed] ERROR: {exc.message}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()

    print(
        "[seed] done: {users} users, {feedback} feedback, {reports} reports, "
        "{flagged} flagged".format(**summary)
    )
    print(f"[seed] all demo users share the password {DEMO_PASSWORD!r}")


if __name__ == "__main__":
    main()
