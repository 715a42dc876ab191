"""Reseed the question bank and reference data.

Run with ``python -m pathways.seed``. Existing rows in the seeded tables are
deleted first; accounts and quiz attempts are left alone.
"""
from __future__ import annotations
import logging
from datetime import datetime, timedelta
from typing import Dict

from sqlalchemy import delete
from sqlalchemy.orm import Session

from .categories import QuizCategory
from .db import SessionLocal, init_db
from .models import College, Course, QuizQuestion, TimelineEvent

logger = logging.getLogger(__name__)


CLASS10_QUESTIONS = [
	("Which subject do you enjoy the most?", ["Mathematics", "Science", "Social Studies", "Languages", "Arts"]),
	("What type of activities interest you the most?", ["Problem solving and calculations", "Experiments and research", "Reading and writing", "Creative activities", "Business and economics"]),
	("What is your career goal?", ["Doctor/Engineer", "Teacher/Professor", "Business owner", "Artist/Designer", "Government officer"]),
	("How do you prefer to learn?", ["Hands-on experiments", "Theoretical concepts", "Group discussions", "Visual presentations", "Individual study"]),
	("What motivates you the most?", ["Solving complex problems", "Helping others", "Financial success", "Creative expression", "Recognition and status"]),
	("Which skill do you want to develop further?", ["Analytical thinking", "Communication", "Leadership", "Creativity", "Technical skills"]),
]

CLASS12_QUESTIONS = [
	("What type of work environment do you prefer?", ["Office/Corporate", "Laboratory/Research", "Field work", "Creative studio", "Hospital/Clinic"]),
	("What are your strongest skills?", ["Mathematics and Logic", "Science and Research", "Communication", "Leadership", "Creative thinking"]),
	("Which career path appeals to you most?", ["Technology and Engineering", "Healthcare", "Business and Management", "Education", "Arts and Media"]),
	("How important is work-life balance to you?", ["Very important", "Somewhat important", "Not very important", "Depends on the career", "I prefer challenging work"]),
	("What type of impact do you want to make?", ["Solve technical problems", "Help people directly", "Build businesses", "Educate others", "Create and inspire"]),
	("What is your preferred study approach?", ["Intensive focused study", "Practical application", "Research and analysis", "Collaborative learning", "Self-paced learning"]),
]

COURSES = [
	dict(name="Computer Science Engineering", stream="Science", description="Study of algorithms, programming, software development, and computer systems", careers=["Software Developer", "Data Scientist", "System Administrator", "AI Engineer"], duration="4 years", eligibility="Class 12 with Physics, Chemistry, Mathematics"),
	dict(name="Mechanical Engineering", stream="Science", description="Design, analysis, and manufacturing of mechanical systems and machines", careers=["Mechanical Engineer", "Design Engineer", "Production Manager", "Automotive Engineer"], duration="4 years", eligibility="Class 12 with Physics, Chemistry, Mathematics"),
	dict(name="MBBS (Bachelor of Medicine and Surgery)", stream="Science", description="Comprehensive medical education to become a doctor", careers=["Doctor", "Surgeon", "Medical Researcher", "Healthcare Administrator"], duration="5.5 years", eligibility="Class 12 with Physics, Chemistry, Biology"),
	dict(name="Bachelor of Commerce (B.Com)", stream="Commerce", description="Comprehensive study of commerce, accounting, and business principles", careers=["Accountant", "Financial Analyst", "Tax Consultant", "Business Analyst"], duration="3 years", eligibility="Class 12 with Commerce subjects"),
	dict(name="Bachelor of Business Administration (BBA)", stream="Commerce", description="Management and business administration skills", careers=["Business Manager", "HR Executive", "Marketing Manager", "Operations Manager"], duration="3 years", eligibility="Class 12 any stream"),
	dict(name="Chartered Accountancy (CA)", stream="Commerce", description="Professional course in accounting, taxation, and auditing", careers=["Chartered Accountant", "Financial Advisor", "Tax Consultant", "Auditor"], duration="3-5 years", eligibility="Class 12 any stream"),
	dict(name="Bachelor of Arts (BA)", stream="Arts", description="Liberal arts education covering humanities and social sciences", careers=["Teacher", "Journalist", "Social Worker", "Government Officer"], duration="3 years", eligibility="Class 12 any stream"),
	dict(name="Psychology", stream="Arts", description="Study of human behavior and mental processes", careers=["Psychologist", "Counselor", "Therapist", "Research Analyst"], duration="3 years", eligibility="Class 12 any stream"),
	dict(name="Law (LLB)", stream="Arts", description="Legal studies and jurisprudence", careers=["Lawyer", "Judge", "Legal Advisor", "Corporate Counsel"], duration="3-5 years", eligibility="Graduation or Class 12"),
]

COLLEGES = [
	dict(name="Indian Institute of Technology Delhi", location="New Delhi", programs=["Computer Science", "Mechanical Engineering", "Electrical Engineering", "Civil Engineering"], facilities=["Library", "Hostels", "Sports Complex", "Research Labs"], type="Government", ranking=1),
	dict(name="Indian Institute of Management Ahmedabad", location="Ahmedabad", programs=["MBA", "Management Studies", "Business Analytics"], facilities=["Modern Campus", "Industry Connections", "Placement Cell", "Library"], type="Government", ranking=2),
	dict(name="All India Institute of Medical Sciences Delhi", location="New Delhi", programs=["MBBS", "MD", "MS", "Nursing"], facilities=["Hospital", "Medical Labs", "Research Centers", "Hostels"], type="Government", ranking=1),
	dict(name="Delhi University", location="New Delhi", programs=["BA", "B.Com", "B.Sc", "MA", "M.Com"], facilities=["Multiple Colleges", "Library", "Sports Facilities", "Cultural Centers"], type="Government", ranking=5),
	dict(name="Manipal Institute of Technology", location="Manipal", programs=["Engineering", "Medicine", "Management", "Pharmacy"], facilities=["Modern Labs", "Hostels", "Sports Complex", "Industry Partnerships"], type="Private", ranking=15),
	dict(name="Christ University", location="Bangalore", programs=["Engineering", "Management", "Arts", "Science"], facilities=["Digital Campus", "International Programs", "Research Centers", "Hostels"], type="Private", ranking=20),
]

# (title, days from seeding, description, category)
TIMELINE = [
	("JEE Main Registration", 10, "Registration opens for the JEE Main examination", "exam"),
	("NEET Application Deadline", 25, "Last date to apply for the NEET medical entrance exam", "exam"),
	("Scholarship Application Deadline", 45, "Last date to apply for merit-based scholarships", "scholarship"),
	("College Admission Counseling", 75, "Counseling process for various college admissions", "admission"),
	("Career Guidance Workshop", 5, "Interactive workshop on career planning and guidance", "general"),
	("Education Fair", 120, "Annual education fair with college representatives", "general"),
]


def seed(db: Session) -> Dict[str, int]:
	for model in (QuizQuestion, Course, College, TimelineEvent):
		db.execute(delete(model))

	# Spaced timestamps keep the bank order stable within a category
	base = datetime.utcnow()
	for category, bank in ((QuizCategory.CLASS10, CLASS10_QUESTIONS), (QuizCategory.CLASS12, CLASS12_QUESTIONS)):
		for i, (text, options) in enumerate(bank):
			db.add(QuizQuestion(question=text, options=options, category=category.value, created_at=base + timedelta(seconds=i)))

	db.add_all(Course(**c) for c in COURSES)
	db.add_all(College(**c) for c in COLLEGES)
	today = datetime.utcnow().replace(hour=9, minute=0, second=0, microsecond=0)
	db.add_all(
		TimelineEvent(title=title, date=today + timedelta(days=offset), description=desc, category=cat)
		for title, offset, desc, cat in TIMELINE
	)
	db.commit()
	return {
		"questions": len(CLASS10_QUESTIONS) + len(CLASS12_QUESTIONS),
		"courses": len(COURSES),
		"colleges": len(COLLEGES),
		"timeline": len(TIMELINE),
	}


def main() -> None:
	logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
	init_db()
	db = SessionLocal()
	try:
		counts = seed(db)
	finally:
		db.close()
	logger.info("Database seeding completed: %s", counts)


if __name__ == "__main__":
	main()
