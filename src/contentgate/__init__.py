"""Caching read-through gateway for the Strapi content API."""
