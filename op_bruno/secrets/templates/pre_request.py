"""Pre-request script that resolves secrets from 1Password inside Bruno."""
import json
from string import Template
from typing import Dict

from ..domains.models import SecretMap

# Bruno runs this before every request. It must not contain the managed
# block markers; the merger adds those around it.
PRE_REQUEST_TEMPLATE = Template("""\
// Auto-generated by op-bruno. Values are read from 1Password at request time.
const { execFileSync } = require('child_process');

const secretReferences = $references;

const envName = bru.getEnvName();
const references = secretReferences[envName] || {};

for (const [name, reference] of Object.entries(references)) {
  const [vault, item, ...label] = reference.replace('vault://', '').split('/');
  try {
    const value = execFileSync(
      'op',
      ['item', 'get', item, '--vault', vault, '--fields', 'label=' + label.join('/'), '--reveal'],
      { encoding: 'utf-8' }
    ).trim();
    bru.setEnvVar(name, value);
  } catch (error) {
    console.warn('Could not read ' + name + ' from 1Password: ' + error.message);
  }
}
""")


def _reference_table(secret_map: SecretMap) -> Dict[str, Dict[str, str]]:
    return {
        env: {variable.name: variable.value for variable in variables if variable.value}
        for env, variables in secret_map.items()
        if variables
    }


def render_pre_request_script(secret_map: SecretMap) -> str:
    """
    Render the JavaScript pre-request script for a SecretMap.

    Args:
        secret_map: Environment name -> secret variables whose values are
            vault references

    Returns:
        Script text, identical for identical input
    """
    references = json.dumps(_reference_table(secret_map), indent=2)
    return PRE_REQUEST_TEMPLATE.substitute(references=references)
