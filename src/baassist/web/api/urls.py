"""URL configuration for API endpoints."""

from django.urls import re_path

from baassist.web.api import views

urlpatterns = [
    re_path(r"^generate-documents/?$", views.generate_documents, name="generate_documents"),
    re_path(r"^conduct-research/?$", views.conduct_research, name="conduct_research"),
    re_path(r"^breakdown-tasks/?$", views.breakdown_tasks, name="breakdown_tasks"),
    re_path(r"^assign-tasks/?$", views.assign_tasks, name="assign_tasks"),
    re_path(r"^create-jira-tasks/?$", views.create_jira_tasks, name="create_jira_tasks"),
    re_path(r"^health/?$", views.health, name="health"),
]
