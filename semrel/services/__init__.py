"""Application services for semrel.

Services implement the release logic, coordinating between the core types
(core/) and infrastructure (git/, platform/).
"""
