from __future__ import annotations
from datetime import timedelta
from typing import List

from .models import ActivityLog, Resource, ResourceType, ScheduleItem, utcnow


# Semester schedule used to resolve phrases like "last Tuesday's lecture"
SCHEDULE: List[ScheduleItem] = [
	ScheduleItem(date="2025-02-10", topic="Introduction to Database Systems"),
	ScheduleItem(date="2025-02-12", topic="ER Model and Relational Model"),
	ScheduleItem(date="2025-02-17", topic="DBMS Normalization"),
	ScheduleItem(date="2025-02-19", topic="SQL Basics"),
	ScheduleItem(date="2025-02-24", topic="Advanced SQL and Indexing"),
]


_INITIAL_RESOURCES: List[Resource] = [
	Resource(
		id="res-1",
		title="Unit 1: Intro to DBMS",
		type=ResourceType.PPT,
		topic="Introduction to Database Systems",
		date_str="2025-02-10",
		tags=["intro", "dbms", "unit 1"],
		downloads=120,
		content=(
			"A database is an organized collection of data, generally stored and accessed electronically from a computer system. "
			"Key concepts: DBMS, RDBMS, SQL, NoSQL. Advantages: Data independence, efficient access, data integrity."
		),
	),
	Resource(
		id="res-2",
		title="Unit 2: Normalization Notes",
		type=ResourceType.PDF,
		topic="DBMS Normalization",
		date_str="2025-02-17",
		tags=["normalization", "1nf", "2nf", "3nf", "bcnf"],
		downloads=45,
		content=(
			"Normalization is the process of organizing data in a database. 1NF: Atomic values. 2NF: No partial dependency. "
			"3NF: No transitive dependency. BCNF: A stricter version of 3NF. It reduces data redundancy and improves data integrity."
		),
	),
	Resource(
		id="res-3",
		title="Assignment 3: SQL Queries",
		type=ResourceType.ASSIGNMENT,
		topic="SQL Basics",
		date_str="2025-02-19",
		tags=["homework", "sql", "queries"],
		downloads=89,
		content=(
			"1. Write a query to select all students. 2. Write a query to find the average grade. "
			"3. Join the students and courses tables. Due date: 2025-02-26."
		),
	),
	Resource(
		id="res-4",
		title="Advanced Indexing Strategies",
		type=ResourceType.PDF,
		topic="Advanced SQL and Indexing",
		date_str="2025-02-24",
		tags=["indexing", "b-tree", "performance"],
		downloads=12,
		content=(
			"Indexes are used to quickly locate data without having to search every row in a database table. "
			"B-Trees and Hash Indexes are common types. Clustered vs Non-clustered indexes."
		),
	),
	Resource(
		id="res-5",
		title="ER Diagram Structure",
		type=ResourceType.IMAGE,
		topic="ER Model and Relational Model",
		date_str="2025-02-12",
		tags=["diagram", "er-model", "image"],
		downloads=34,
		content=(
			"Visual diagram of Entity Relationship model components: Entities (Rectangles), Attributes (Ovals), "
			"Relationships (Diamonds)."
		),
	),
	Resource(
		id="res-6",
		title="Lecture Recording: SQL Joins",
		type=ResourceType.VIDEO,
		topic="SQL Basics",
		date_str="2025-02-19",
		tags=["recording", "video", "joins"],
		downloads=56,
		content="Video recording of the lecture covering Inner Join, Left Join, Right Join, and Full Outer Join examples.",
	),
]


def initial_resources() -> List[Resource]:
	"""Fresh copies of the seed resources for a new session."""
	return [r.model_copy(deep=True) for r in _INITIAL_RESOURCES]


def demo_activity() -> List[ActivityLog]:
	now = utcnow()
	return [
		ActivityLog(id="log-1", resource_title="Unit 2: Normalization Notes", topic="DBMS Normalization", query="notes for normalization", timestamp=now - timedelta(seconds=100)),
		ActivityLog(id="log-2", resource_title="Unit 2: Normalization Notes", topic="DBMS Normalization", query="send unit 2 pdf", timestamp=now - timedelta(seconds=200)),
		ActivityLog(id="log-3", resource_title="Unit 1: Intro to DBMS", topic="Introduction to Database Systems", query="intro slides", timestamp=now - timedelta(seconds=500)),
	]
