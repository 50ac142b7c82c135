"""Shared fixtures for the BPMN fixer tests."""

import pytest

from inspire_bpmn_fixer.config.settings import FixerConfig
from inspire_bpmn_fixer.fixing.inspire_fixer import InspireBPMNFixer

NAMESPACES = (
    'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" '
    'xmlns:bpmn2="http://www.omg.org/spec/BPMN/20100524/MODEL" '
    'xmlns:bpmndi="http://www.omg.org/spec/BPMN/20100524/DI" '
    'xmlns:inspire="http://www.bpminspire.com/bpmn"'
)

INSPIRE_BPMN = f"""<?xml version="1.0" encoding="UTF-8"?>
<bpmn2:definitions {NAMESPACES} id="1001" targetNamespace="http://example.com/bpmn">
  <bpmn2:process id="1002" isExecutable="true">
    <bpmn2:startEvent id="1003">
      <bpmn2:outgoing>1005</bpmn2:outgoing>
    </bpmn2:startEvent>
    <bpmn2:exclusiveGateway id="1004" default="-7">
      <bpmn2:incoming>1005</bpmn2:incoming>
    </bpmn2:exclusiveGateway>
    <bpmn2:sequenceFlow id="1005" sourceRef="1003" targetRef="1004">
      <bpmn2:conditionExpression xsi:type="inspire:Rule" id="2001" expression="${{amount &gt; 100}}"/>
    </bpmn2:sequenceFlow>
    <bpmn2:intermediateCatchEvent id="wait_a" name="12 hours">
      <bpmn2:timerEventDefinition id="-12">
        <bpmn2:timeDuration xsi:type="inspire:StringExpression" id="2002" expression="PT5M"/>
      </bpmn2:timerEventDefinition>
    </bpmn2:intermediateCatchEvent>
  </bpmn2:process>
  <bpmndi:BPMNDiagram id="diagram_1">
    <bpmndi:BPMNPlane id="plane_1" bpmnElement="1002"/>
  </bpmndi:BPMNDiagram>
</bpmn2:definitions>
"""


def wrap(body: str) -> bytes:
    """Wrap element markup in a definitions root declaring the BPMN prefixes."""
    return (f'<bpmn2:definitions {NAMESPACES} targetNamespace="http://example.com/bpmn">'
            f'{body}</bpmn2:definitions>').encode("utf-8")


@pytest.fixture
def config():
    """Default configuration (prefix "A")."""
    return FixerConfig()


@pytest.fixture
def fixer(config):
    """Fixer with the default configuration."""
    return InspireBPMNFixer(config)


@pytest.fixture
def underscore_fixer():
    """Fixer using "_" as the QName prefix."""
    return InspireBPMNFixer(FixerConfig(qname_prefix="_"))


@pytest.fixture
def inspire_bpmn():
    """A small BPM Inspire export with every kind of problem."""
    return INSPIRE_BPMN.encode("utf-8")


@pytest.fixture
def bpmn_dir(tmp_path, inspire_bpmn):
    """Directory holding two Inspire exports and some unrelated files."""
    (tmp_path / "order.bpmn").write_bytes(inspire_bpmn)
    (tmp_path / "invoice.bpmn").write_bytes(inspire_bpmn)
    (tmp_path / "notes.xml").write_bytes(inspire_bpmn)
    nested = tmp_path / "archive"
    nested.mkdir()
    (nested / "old.bpmn").write_bytes(inspire_bpmn)
    return tmp_path
