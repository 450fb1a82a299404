"""
InternLink API
Internship marketplace backend connecting students, companies and admins.

Architecture:
- PostgreSQL: users, student/company profiles, internships, applications
- Local disk: uploaded resumes, served under /uploads
- JWT bearer tokens + one policy table for role/ownership checks
"""

__version__ = "1.0.0"
