"""
Application layer - Application Business Rules.

This layer contains application-specific business rules, including:
- Interfaces (ports) for infrastructure dependencies
- Use cases that orchestrate domain logic
- Application services (key policy, upload validation)
"""
