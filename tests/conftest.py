"""
Shared fixtures: Playwright sources and parse / classify helpers.
"""

import textwrap

import pytest

from pwmermaid.classifier import ActionClassifier
from pwmermaid.js_parser import parse_source
from pwmermaid.walker import WalkEvent, walk_calls


LOGIN_SUITE = textwrap.dedent("""\
    const { test, expect } = require('@playwright/test');

    test('should login successfully', async ({ page }) => {
      await page.goto('https://mywebsite.com');
      await page.click('#login');
      await page.fill('#username', 'valid-username');
      await page.fill('#password', 'valid-password');
      await page.click('#submit');
      await expect(page).toHaveURL('https://mywebsite.com/lobby');
    });

    test('should display invalid credentials message', async ({ page }) => {
        await page.goto('https://mywebsite.com');
        await page.click('#login');
        await page.fill('#username', 'invalid-username');
        await page.fill('#password', 'invalid-password');
        await expect(page.getByText('Error message - invalid credentials')).toBeVisible();
    });

    test('should display empty username message', { tag: '@manual' }, async ({ page }) => {
        await page.goto('https://mywebsite.com');
        await page.click('#login');
        await page.fill('#username', ' ');
        await expect(page.getByText('Error message - empty username')).toBeVisible();
    });
""")


@pytest.fixture
def login_suite():
    return LOGIN_SUITE


@pytest.fixture
def calls():
    """Return every call expression of a source, in walk order."""
    def _calls(source, language="javascript"):
        tree = parse_source(textwrap.dedent(source), language=language)
        return [node for event, node in walk_calls(tree.root_node) if event is WalkEvent.ENTER]
    return _calls


@pytest.fixture
def classify(calls):
    """Return the non-empty classifications of a source, in walk order."""
    def _classify(source, classifier=None):
        classifier = classifier or ActionClassifier()
        actions = [classifier.classify(node) for node in calls(source)]
        return [a for a in actions if a is not None]
    return _classify
