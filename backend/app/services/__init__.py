"""
Services Module

Domain logic behind the API routes:
- snippets: snippet lifecycle (create, read, update with versioning, delete)
- engagement: like toggle and comments
- listing: public feed queries
- github_oauth: third-party sign-in
- serializers: ORM rows -> API dictionaries
"""
